"""Load, validate, and flatten OpenAPI documents.

Specs may be local YAML/JSON files or ``http(s)`` URLs. Both OpenAPI 3.x and
Swagger 2.0 documents are accepted; Swagger ``body`` parameters become request
bodies so the page templates only deal with one shape.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import requests
from jsonschema.exceptions import best_match
from jsonschema.validators import Draft202012Validator
from requests.adapters import HTTPAdapter
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from urllib3.util.retry import Retry

from aura_docs.errors import MalformedSpecError, MissingFileError

from .models import (
    HTTP_METHODS,
    ApiDocument,
    ApiOperation,
    ApiParameter,
    ApiRequestBody,
    ApiResponse,
)

_OPERATION_SCHEMA: dict[str, typ.Any] = {
    "type": "object",
    "required": ["responses"],
    "properties": {
        "tags": {"type": "array", "items": {"type": "string"}},
        "operationId": {"type": "string"},
        "summary": {"type": "string"},
        "description": {"type": "string"},
        "deprecated": {"type": "boolean"},
        "parameters": {"$ref": "#/$defs/parameters"},
        "requestBody": {"type": "object"},
        "responses": {
            "type": "object",
            "minProperties": 1,
            "patternProperties": {"^x-": {}},
            "additionalProperties": {"type": "object"},
        },
    },
}

OPENAPI_DOCUMENT_SCHEMA: dict[str, typ.Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["info", "paths"],
    "anyOf": [
        {
            "required": ["openapi"],
            "properties": {"openapi": {"type": "string", "pattern": r"^3\.\d+(\.\d+)?$"}},
        },
        {"required": ["swagger"], "properties": {"swagger": {"enum": ["2.0", 2.0]}}},
    ],
    "properties": {
        "info": {
            "type": "object",
            "required": ["title", "version"],
            "properties": {
                "title": {"type": "string", "minLength": 1},
                "version": {"type": ["string", "number"]},
                "description": {"type": "string"},
            },
        },
        "paths": {
            "type": "object",
            "patternProperties": {
                "^/": {"$ref": "#/$defs/pathItem"},
                "^x-": {},
            },
            "additionalProperties": False,
        },
    },
    "$defs": {
        "parameters": {
            "type": "array",
            "items": {
                "type": "object",
                "anyOf": [
                    {"required": ["$ref"]},
                    {
                        "required": ["name", "in"],
                        "properties": {
                            "name": {"type": "string"},
                            "in": {"enum": ["path", "query", "header", "cookie", "body", "formData"]},
                        },
                    },
                ],
            },
        },
        "pathItem": {
            "type": "object",
            "properties": {
                **{method: _OPERATION_SCHEMA for method in HTTP_METHODS},
                "parameters": {"$ref": "#/$defs/parameters"},
            },
        },
    },
}


def load_openapi_document(
    spec_path: Path | str, *, session: requests.Session | None = None
) -> ApiDocument:
    """Read, validate, and flatten the API description at ``spec_path``.

    Parameters
    ----------
    spec_path : Path or str
        Local file path, or an ``http(s)`` URL given as a string.
    session : requests.Session, optional
        Session used for remote specs; a retrying session is built when omitted.

    Returns
    -------
    ApiDocument
        Title, version, and every operation in path order.

    Raises
    ------
    MissingFileError
        If a local spec does not exist.
    MalformedSpecError
        If the document cannot be fetched or parsed, fails structural
        validation, or contains an unresolvable local ``$ref``.
    """
    text = _read_spec_text(spec_path, session=session)
    raw = _parse_spec_text(text, spec_path)
    validate_openapi_document(raw, spec_path)
    return _build_document(raw, spec_path)


def validate_openapi_document(raw: object, spec_path: Path | str = "<memory>") -> None:
    """Raise MalformedSpecError when ``raw`` is not an OpenAPI/Swagger document."""
    validator = Draft202012Validator(OPENAPI_DOCUMENT_SCHEMA)
    first = best_match(validator.iter_errors(raw))
    if first is not None:
        location = "/".join(str(part) for part in first.absolute_path) or "<root>"
        msg = f"OpenAPI spec '{spec_path}' is invalid at {location}: {first.message}"
        raise MalformedSpecError(msg)


def collect_operations(raw: typ.Mapping[str, typ.Any]) -> list[ApiOperation]:
    """Flatten every (path, method) pair of a validated document."""
    is_swagger = "swagger" in raw
    global_consumes = tuple(raw.get("consumes") or ("application/json",))
    global_produces = tuple(raw.get("produces") or ("application/json",))
    operations: list[ApiOperation] = []
    for path, path_item in raw["paths"].items():
        if not str(path).startswith("/"):
            continue
        shared_params = path_item.get("parameters") or []
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if operation is None:
                continue
            merged = _merge_parameters(raw, shared_params, operation.get("parameters") or [])
            if is_swagger:
                body = _swagger_body(
                    merged, tuple(operation.get("consumes") or global_consumes)
                )
                produces = tuple(operation.get("produces") or global_produces)
                merged = [param for param in merged if param.get("in") not in {"body", "formData"}]
            else:
                body = _openapi_body(raw, operation.get("requestBody"))
                produces = ()
            tags = operation.get("tags") or []
            operations.append(
                ApiOperation(
                    method=method,
                    path=str(path),
                    operation_id=operation.get("operationId"),
                    summary=str(operation.get("summary") or "").strip(),
                    description=str(operation.get("description") or "").strip(),
                    tag=str(tags[0]) if tags else None,
                    parameters=tuple(_build_parameter(param) for param in merged),
                    request_body=body,
                    responses=_build_responses(raw, operation["responses"], produces),
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )
    return operations


def _read_spec_text(spec_path: Path | str, *, session: requests.Session | None) -> str:
    if isinstance(spec_path, str):
        return _fetch_remote_spec(spec_path, session=session)
    if not spec_path.exists():
        raise MissingFileError("OpenAPI spec", spec_path)
    return spec_path.read_text(encoding="utf-8")


def _fetch_remote_spec(url: str, *, session: requests.Session | None) -> str:
    """Download a remote spec with retries on transient server errors."""
    owned = session is None
    if session is None:
        session = requests.Session()
        retry = Retry(
            total=5,
            read=5,
            connect=3,
            backoff_factor=0.5,
            status_forcelist=(500, 502, 503, 504),
            allowed_methods=("GET", "HEAD"),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
    try:
        resp = session.get(url, timeout=30)
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as exc:
        msg = f"Failed to fetch OpenAPI spec '{url}': {exc}"
        raise MalformedSpecError(msg) from exc
    finally:
        if owned:
            session.close()


def _parse_spec_text(text: str, spec_path: Path | str) -> object:
    """Parse YAML or JSON text (JSON is read as YAML 1.2)."""
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        return loader.load(text)
    except YAMLError as exc:
        msg = f"OpenAPI spec '{spec_path}' could not be parsed: {exc}"
        raise MalformedSpecError(msg) from exc


def _build_document(raw: typ.Mapping[str, typ.Any], spec_path: Path | str) -> ApiDocument:
    info = raw["info"]
    try:
        operations = collect_operations(raw)
    except LookupError as exc:
        msg = f"OpenAPI spec '{spec_path}' has an unresolvable reference: {exc}"
        raise MalformedSpecError(msg) from exc
    except TypeError as exc:
        msg = f"OpenAPI spec '{spec_path}' is malformed: {exc}"
        raise MalformedSpecError(msg) from exc
    return ApiDocument(
        title=str(info["title"]),
        version=str(info["version"]),
        description=str(info.get("description") or "").strip(),
        operations=tuple(operations),
    )


def resolve_ref(raw: typ.Mapping[str, typ.Any], node: object, *, depth: int = 0) -> typ.Any:
    """Follow a local ``$ref`` (``#/a/b``) until a concrete object is reached.

    Raises
    ------
    LookupError
        If the pointer is not local, does not exist, or loops.
    """
    if not isinstance(node, dict) or "$ref" not in node:
        return node
    if depth > 20:
        msg = f"reference cycle at {node['$ref']!r}"
        raise LookupError(msg)
    pointer = str(node["$ref"])
    if not pointer.startswith("#/"):
        msg = f"only local references are supported, got {pointer!r}"
        raise LookupError(msg)
    target: typ.Any = raw
    for part in pointer[2:].split("/"):
        key = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(target, dict) or key not in target:
            msg = f"{pointer!r} does not exist"
            raise LookupError(msg)
        target = target[key]
    return resolve_ref(raw, target, depth=depth + 1)


def _resolve_object(raw: typ.Mapping[str, typ.Any], node: object, where: str) -> dict[str, typ.Any]:
    """Resolve ``node`` and require a mapping, raising TypeError otherwise."""
    resolved = resolve_ref(raw, node)
    if not isinstance(resolved, dict):
        msg = f"{where} must be an object, got {type(resolved).__name__}"
        raise TypeError(msg)
    return resolved


def describe_schema(schema: object) -> str:
    """Return a short type label for a JSON schema (``$ref`` names win)."""
    if not isinstance(schema, dict):
        return "any"
    if "$ref" in schema:
        return str(schema["$ref"]).rsplit("/", 1)[-1]
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        schema_type = " | ".join(str(part) for part in schema_type)
    if schema_type == "array":
        return f"{describe_schema(schema.get('items'))}[]"
    if schema_type:
        label = str(schema_type)
        return f"{label} ({schema['format']})" if schema.get("format") else label
    for combinator in ("oneOf", "anyOf", "allOf"):
        if combinator in schema:
            joiner = " & " if combinator == "allOf" else " | "
            return joiner.join(describe_schema(part) for part in schema[combinator])
    return "object"


def _merge_parameters(
    raw: typ.Mapping[str, typ.Any],
    shared: list[typ.Any],
    own: list[typ.Any],
) -> list[dict[str, typ.Any]]:
    """Merge path-level and operation-level parameters; operation wins."""
    merged: dict[tuple[str, str], dict[str, typ.Any]] = {}
    for param in [*shared, *own]:
        resolved = _resolve_object(raw, param, "parameter")
        merged[(str(resolved.get("name")), str(resolved.get("in")))] = resolved
    return list(merged.values())


def _build_parameter(param: typ.Mapping[str, typ.Any]) -> ApiParameter:
    location = str(param.get("in"))
    schema = param.get("schema") or {key: param[key] for key in ("type", "format", "items") if key in param}
    return ApiParameter(
        name=str(param.get("name")),
        location=location,
        required=bool(param.get("required", location == "path")),
        schema_type=describe_schema(schema),
        description=str(param.get("description") or "").strip(),
    )


def _swagger_body(
    params: list[dict[str, typ.Any]], consumes: tuple[str, ...]
) -> ApiRequestBody | None:
    for param in params:
        if param.get("in") == "body":
            return ApiRequestBody(
                required=bool(param.get("required", False)),
                content_types=consumes,
                schema_type=describe_schema(param.get("schema")),
                description=str(param.get("description") or "").strip(),
            )
    form = [param for param in params if param.get("in") == "formData"]
    if form:
        return ApiRequestBody(
            required=any(bool(param.get("required")) for param in form),
            content_types=consumes,
            schema_type="form: " + ", ".join(str(param.get("name")) for param in form),
        )
    return None


def _openapi_body(raw: typ.Mapping[str, typ.Any], body: object) -> ApiRequestBody | None:
    if body is None:
        return None
    resolved = _resolve_object(raw, body, "requestBody")
    content = _resolve_object(raw, resolved.get("content") or {}, "requestBody content")
    schema_types = {describe_schema(media.get("schema")) for media in content.values() if isinstance(media, dict)}
    return ApiRequestBody(
        required=bool(resolved.get("required", False)),
        content_types=tuple(content),
        schema_type=" | ".join(sorted(schema_types)) or "any",
        description=str(resolved.get("description") or "").strip(),
    )


def _build_responses(
    raw: typ.Mapping[str, typ.Any],
    responses: typ.Mapping[str, typ.Any],
    produces: tuple[str, ...],
) -> tuple[ApiResponse, ...]:
    built: list[ApiResponse] = []
    for status, payload in responses.items():
        if str(status).startswith("x-"):
            continue
        resolved = _resolve_object(raw, payload, f"response '{status}'")
        if "content" in resolved:
            content = _resolve_object(raw, resolved.get("content") or {}, f"response '{status}' content")
            content_types = tuple(content)
            schemas = [media.get("schema") for media in content.values() if isinstance(media, dict)]
            schema_type = describe_schema(schemas[0]) if schemas and schemas[0] else None
        elif "schema" in resolved:
            content_types = produces
            schema_type = describe_schema(resolved.get("schema"))
        else:
            content_types = ()
            schema_type = None
        built.append(
            ApiResponse(
                status=str(status),
                description=str(resolved.get("description") or "").strip(),
                content_types=content_types,
                schema_type=schema_type,
            )
        )
    return tuple(built)


__all__ = [
    "OPENAPI_DOCUMENT_SCHEMA",
    "collect_operations",
    "describe_schema",
    "load_openapi_document",
    "resolve_ref",
    "validate_openapi_document",
]
