"""Common response schemas."""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorDetail


class SuccessResponse(BaseModel):
    message: str
