"""Convert OpenAPI documents into API reference pages for the docs pipeline."""

from .loader import (
    OPENAPI_DOCUMENT_SCHEMA,
    collect_operations,
    load_openapi_document,
    validate_openapi_document,
)
from .models import (
    ApiDocument,
    ApiOperation,
    ApiParameter,
    ApiRequestBody,
    ApiResponse,
    GeneratedPage,
)
from .page_generator import ApiDocsGenerator

__all__ = [
    "OPENAPI_DOCUMENT_SCHEMA",
    "ApiDocsGenerator",
    "ApiDocument",
    "ApiOperation",
    "ApiParameter",
    "ApiRequestBody",
    "ApiResponse",
    "GeneratedPage",
    "collect_operations",
    "load_openapi_document",
    "validate_openapi_document",
]
