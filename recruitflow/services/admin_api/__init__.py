"""Admin API integration (field management, bulk import, resume parsing, export)."""

from .cancel import CancelToken
from .client import AdminApiClient
from .config import AdminApiConfig, resolve_config
from .models import ApiAuthError, ApiError, ApiNotFound, ApiRequestError, RequestCancelled
from .schemas import FieldDefinition, ImportOptions, SUPPORTED_ENTITY_TYPES

__all__ = [
    "AdminApiClient",
    "AdminApiConfig",
    "ApiAuthError",
    "ApiError",
    "ApiNotFound",
    "ApiRequestError",
    "CancelToken",
    "FieldDefinition",
    "ImportOptions",
    "RequestCancelled",
    "SUPPORTED_ENTITY_TYPES",
    "resolve_config",
]
