"""Structured logging middleware for FastAPI requests."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from bookhub.utils.security import AuthenticationError, TokenPayload, decode_access_token

logger = logging.getLogger("bookhub.middleware.structured")

COLOR_RESET = "\u001b[0m"
COLOR_GREEN = "\u001b[32m"
COLOR_CYAN = "\u001b[36m"
COLOR_YELLOW = "\u001b[33m"
COLOR_RED = "\u001b[31m"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one colourised line per request with the caller's identity."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        log_payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else None,
        }

        token_payload = self._decode_token(request)
        if token_payload is not None:
            log_payload["user_id"] = token_payload.user_id
            log_payload["is_admin"] = token_payload.is_admin

        try:
            response = await call_next(request)
        except Exception as exc:
            log_payload["status_code"] = 500
            log_payload["duration_ms"] = self._elapsed_ms(start_time)
            log_payload["error"] = repr(exc)
            logger.exception(self._format_console_message(log_payload))
            raise

        log_payload["status_code"] = response.status_code
        log_payload["duration_ms"] = self._elapsed_ms(start_time)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, self._format_console_message(log_payload))
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        """Return elapsed milliseconds rounded to two decimals."""

        return round((time.perf_counter() - start_time) * 1000, 2)

    @staticmethod
    def _extract_bearer_token(request: Request) -> Optional[str]:
        """Return the bearer token from the request headers when present."""

        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        return token

    def _decode_token(self, request: Request) -> TokenPayload | None:
        token = self._extract_bearer_token(request)
        settings = getattr(request.app.state, "settings", None)
        if not token or settings is None:
            return None

        try:
            return decode_access_token(token, settings.security)
        except AuthenticationError:
            logger.debug("Ignoring undecodable bearer token in request log")
            return None

    @staticmethod
    def _describe_caller(payload: dict[str, Any]) -> str:
        user_id = payload.get("user_id")
        if user_id is None:
            return "anonymous"
        return f"{user_id}(admin)" if payload.get("is_admin") else str(user_id)

    @classmethod
    def _format_console_message(cls, payload: dict[str, Any]) -> str:
        """Return one request summary line wrapped in an ANSI colour."""

        status = payload.get("status_code") or 0
        if status >= 500:
            color = COLOR_RED
        elif status >= 400:
            color = COLOR_YELLOW
        elif status >= 200:
            color = COLOR_GREEN
        else:
            color = COLOR_CYAN

        message = (
            f"{payload.get('timestamp')} "
            f"{payload.get('method')} {payload.get('url')} -> {status} "
            f"in {payload.get('duration_ms')}ms "
            f"client={payload.get('client_ip') or '-'} "
            f"user={cls._describe_caller(payload)}"
        )
        if "error" in payload:
            message = f"{message} error={payload['error']}"
        return f"{color}{message}{COLOR_RESET}"
