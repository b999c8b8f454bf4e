"""HTTP access to the RecipeShare backend."""

from .errors import ApiError, NormalizedError, normalize_error
from .interceptors import inject_auth, raise_for_failure, sanitize_response
from .pipeline import RESPONSE_STAGES, RequestPipeline

__all__ = [
    "ApiError",
    "NormalizedError",
    "normalize_error",
    "inject_auth",
    "raise_for_failure",
    "sanitize_response",
    "RESPONSE_STAGES",
    "RequestPipeline",
]
