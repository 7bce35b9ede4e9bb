"""Shared dataclasses used by the API reference generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import re

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


@dc.dataclass(frozen=True, slots=True)
class ApiParameter:
    """A path, query, header, or cookie parameter."""

    name: str
    location: str
    required: bool
    schema_type: str
    description: str = ""


@dc.dataclass(frozen=True, slots=True)
class ApiRequestBody:
    """Request payload accepted by an operation."""

    required: bool
    content_types: tuple[str, ...]
    schema_type: str
    description: str = ""


@dc.dataclass(frozen=True, slots=True)
class ApiResponse:
    """One documented response status."""

    status: str
    description: str
    content_types: tuple[str, ...] = ()
    schema_type: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ApiOperation:
    """A single (path, method) pair from the OpenAPI document.

    Attributes
    ----------
    method : str
        Lower-case HTTP method.
    path : str
        Templated path, e.g. ``/api/v1/block/{height}``.
    operation_id : str | None
        ``operationId`` when the document declares one.
    summary : str
        Short summary line (may be empty).
    description : str
        Long-form markdown description (may be empty).
    tag : str | None
        First tag, used to group pages; ``None`` for untagged operations.
    parameters : tuple[ApiParameter, ...]
        Path-level parameters merged with operation-level ones.
    request_body : ApiRequestBody | None
        Accepted payload, if any.
    responses : tuple[ApiResponse, ...]
        Documented responses in declaration order.
    deprecated : bool
        Whether the operation is marked deprecated.
    """

    method: str
    path: str
    operation_id: str | None
    summary: str
    description: str
    tag: str | None
    parameters: tuple[ApiParameter, ...] = ()
    request_body: ApiRequestBody | None = None
    responses: tuple[ApiResponse, ...] = ()
    deprecated: bool = False

    @property
    def title(self) -> str:
        """Return the page title for this operation."""
        return self.summary or self.operation_id or f"{self.method.upper()} {self.path}"

    @property
    def slug_source(self) -> str:
        """Return the text the page filename is derived from."""
        if self.operation_id:
            return _kebab_case(self.operation_id)
        return f"{self.method}-{self.path}"


@dc.dataclass(frozen=True, slots=True)
class ApiDocument:
    """Parsed and validated API description."""

    title: str
    version: str
    description: str
    operations: tuple[ApiOperation, ...]


@dc.dataclass(frozen=True, slots=True)
class GeneratedPage:
    """A rendered reference page awaiting its write to disk."""

    relative_path: str
    doc_id: str
    operation: ApiOperation
    content: str


def _kebab_case(value: str) -> str:
    """Convert camelCase or snake_case identifiers into kebab-case."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", value)
    return spaced.replace("_", "-").lower()


__all__ = [
    "HTTP_METHODS",
    "ApiDocument",
    "ApiOperation",
    "ApiParameter",
    "ApiRequestBody",
    "ApiResponse",
    "GeneratedPage",
]
