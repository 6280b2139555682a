from fastapi import status
from fastapi.responses import JSONResponse

from dailyproxy.schemas import ErrorCode, ErrorResponse


class ProxyError(Exception):
    """Base for every error that aborts a /api/data request."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingCredential(ProxyError):
    code = ErrorCode.MISSING_CREDENTIAL

    def __init__(self, env_var: str):
        super().__init__(f"Secret '{env_var}' is not defined.")


class DownstreamHttpError(ProxyError):
    code = ErrorCode.DOWNSTREAM_HTTP_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int) -> "DownstreamHttpError":
        return cls(f"API responded with status: {status_code}", status_code=status_code)


class MalformedDownstreamPayload(ProxyError):
    code = ErrorCode.MALFORMED_DOWNSTREAM_PAYLOAD


class StoreError(ProxyError):
    code = ErrorCode.STORE_ERROR

    def __init__(self, op: str, reason: object):
        super().__init__(f"Cache store {op} failed: {reason}")


def error_response(message: str, http_status=status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    body = ErrorResponse(error=message)
    return JSONResponse(status_code=http_status, content=body.model_dump())
