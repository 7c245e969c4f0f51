#!/usr/bin/env python3
"""
Run script for the Fantasy Book Hub API
"""
import uvicorn

from bookhub.config.settings import get_settings
from bookhub.main import app

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
