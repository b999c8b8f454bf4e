from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Reported when the request never produced an HTTP status (connection refused, timeout, ...)
NETWORK_ERROR_STATUS = 0

SAFE_MESSAGES: dict[int, str] = {
    400: "Invalid request. Please check your input.",
    401: "Authentication required. Please log in.",
    403: "You do not have permission to perform this action.",
    404: "The requested resource was not found.",
    409: "A conflict occurred. The resource may already exist.",
    422: "The request could not be processed. Please check your input.",
}
SERVER_ERROR_MESSAGE = "A server error occurred. Please try again later."
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class NormalizedError(BaseModel):
    """The only failure information a caller ever sees."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status_code: int = Field(alias="statusCode")
    safe_message: str = Field(alias="safeMessage")


class ApiError(Exception):
    """
    A failed request, reduced to its status code and a fixed message.

    Always raised without a cause or context, so neither the backend
    response nor the transport exception can be reached from it.
    """

    def __init__(self, error: NormalizedError):
        super().__init__(error.safe_message)
        self.error = error

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def safe_message(self) -> str:
        return self.error.safe_message

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, safe_message={self.safe_message!r})"


def get_safe_error_message(status_code: Optional[int]) -> str:
    if status_code is None:
        return GENERIC_ERROR_MESSAGE
    if status_code in SAFE_MESSAGES:
        return SAFE_MESSAGES[status_code]
    if 500 <= status_code <= 599:
        return SERVER_ERROR_MESSAGE
    return GENERIC_ERROR_MESSAGE


def normalize_error(status_code: Optional[int]) -> NormalizedError:
    """
    Build the caller-facing error for a failed request.

    The result depends on the status code alone.

    Args:
        status_code: HTTP status of the failed response, or None when the
            request failed below HTTP.
    """
    if status_code is None:
        status_code = NETWORK_ERROR_STATUS
    return NormalizedError(
        status_code=status_code,
        safe_message=get_safe_error_message(status_code),
    )
