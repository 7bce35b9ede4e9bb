"""Utility helpers shared by the site descriptor loader."""

from __future__ import annotations

import enum
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from aura_docs.errors import MissingFieldError, MissingFileError, SiteConfigError

E = typ.TypeVar("E", bound=enum.Enum)

# Prism theme names mapped onto the closest bundled Pygments style.
PRISM_TO_PYGMENTS: dict[str, str] = {
    "github": "friendly",
    "dracula": "dracula",
    "vsDark": "monokai",
    "vsLight": "vs",
    "nightOwl": "nord",
    "nightOwlLight": "solarized-light",
    "oceanicNext": "native",
    "okaidia": "monokai",
    "palenight": "material",
    "shadesOfPurple": "paraiso-dark",
    "duotoneDark": "zenburn",
    "duotoneLight": "tango",
    "oneDark": "one-dark",
    "oneLight": "default",
}


def _require_mapping(value: object, field: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict or raise for a missing or scalar section."""
    match value:
        case None:
            raise MissingFieldError(field)
        case dict():
            return dict(value)
        case _:
            msg = f"'{field}' must be a mapping."
            raise SiteConfigError(msg)


def _optional_mapping(value: object, field: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict, treating ``None`` as empty."""
    if value is None:
        return {}
    return _require_mapping(value, field)


def _require_str(payload: typ.Mapping[str, typ.Any], key: str, field: str) -> str:
    """Return the non-empty string stored at ``key`` or raise MissingFieldError."""
    value = payload.get(key)
    if value is None:
        raise MissingFieldError(field)
    if isinstance(value, bool | dict | list):
        msg = f"'{field}' must be a string."
        raise SiteConfigError(msg)
    text = str(value).strip()
    if not text:
        raise MissingFieldError(field)
    return text


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_bool(value: object, field: str, *, default: bool) -> bool:
    """Return ``value`` as a bool, rejecting anything but true/false."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    msg = f"'{field}' must be true or false."
    raise SiteConfigError(msg)


def _coerce_enum(enum_type: type[E], value: object, field: str, *, default: E) -> E:
    """Return the enum member named by ``value`` or raise SiteConfigError."""
    if value is None:
        return default
    try:
        return enum_type(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(str(member.value) for member in enum_type)
        msg = f"'{field}' must be one of: {allowed} (got {value!r})."
        raise SiteConfigError(msg) from exc


def _string_list(value: object, field: str) -> tuple[str, ...]:
    """Return a tuple of non-empty strings from a YAML list."""
    match value:
        case None:
            return ()
        case str():
            return (value,)
        case list():
            return tuple(text for item in value if (text := _optional_str(item)))
        case _:
            msg = f"'{field}' must be a list of strings."
            raise SiteConfigError(msg)


def _validate_site_url(url: str) -> str:
    """Ensure ``url`` is an absolute http(s) origin without a path."""
    parsed = urlsplit(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        msg = f"'site.url' must be an absolute http(s) URL (got {url!r})."
        raise SiteConfigError(msg)
    if parsed.path not in {"", "/"} or parsed.query or parsed.fragment:
        msg = (
            f"'site.url' must not contain a path (got {url!r}); "
            "put the path in 'site.base_url' instead."
        )
        raise SiteConfigError(msg)
    return url.rstrip("/")


def _normalize_base_url(base_url: str) -> str:
    """Return ``base_url`` with a leading and trailing slash."""
    if not base_url.startswith("/"):
        msg = f"'site.base_url' must start with '/' (got {base_url!r})."
        raise SiteConfigError(msg)
    if "://" in base_url or "?" in base_url or "#" in base_url:
        msg = f"'site.base_url' must be a path (got {base_url!r})."
        raise SiteConfigError(msg)
    return base_url if base_url.endswith("/") else f"{base_url}/"


def _normalize_route(route: str) -> str:
    """Return a route base path with a single leading slash and no trailing one."""
    stripped = route.strip().strip("/")
    return f"/{stripped}" if stripped else "/"


def _resolve_path(root: Path, value: str | Path) -> Path:
    """Resolve ``value`` against the descriptor directory."""
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _require_existing(root: Path, value: str | Path, label: str) -> Path:
    """Resolve ``value`` and raise MissingFileError when it does not exist."""
    path = _resolve_path(root, value)
    if not path.exists():
        raise MissingFileError(label, path)
    return path


def _is_remote(value: str) -> bool:
    """Return True when ``value`` looks like an http(s) URL."""
    return urlsplit(value).scheme in {"http", "https"}


def _pygments_style(prism_theme: str) -> str:
    """Return the Pygments style used to render the given Prism theme."""
    style = PRISM_TO_PYGMENTS.get(prism_theme, prism_theme)
    try:
        get_style_by_name(style)
    except ClassNotFound as exc:
        known = ", ".join(sorted(PRISM_TO_PYGMENTS))
        msg = f"Unknown code theme '{prism_theme}'. Known themes: {known}"
        raise SiteConfigError(msg) from exc
    return style


def _validate_language(language: str) -> str:
    """Ensure a highlighting language is available to Pygments."""
    try:
        get_lexer_by_name(language)
    except ClassNotFound as exc:
        msg = f"Unsupported highlighting language '{language}'."
        raise SiteConfigError(msg) from exc
    return language


__all__ = [
    "PRISM_TO_PYGMENTS",
    "_coerce_bool",
    "_coerce_enum",
    "_is_remote",
    "_normalize_base_url",
    "_normalize_route",
    "_optional_mapping",
    "_optional_str",
    "_pygments_style",
    "_require_existing",
    "_require_mapping",
    "_require_str",
    "_resolve_path",
    "_string_list",
    "_validate_language",
    "_validate_site_url",
]
