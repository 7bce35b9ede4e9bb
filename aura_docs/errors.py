"""Exception types raised while loading and building a documentation site.

Every failure is fatal to the build: the CLI lets these propagate so the
process exits with a non-zero status and the message reaches the operator.

Examples
--------
>>> from aura_docs.errors import MissingFieldError, SiteConfigError
>>> issubclass(MissingFieldError, SiteConfigError)
True
"""

from __future__ import annotations


class SiteConfigError(ValueError):
    """Raised when the site descriptor is invalid or incomplete."""


class MissingFieldError(SiteConfigError):
    """Raised when a required descriptor field is absent or empty."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Required field '{field}' is missing.")


class MissingFileError(FileNotFoundError):
    """Raised when a path referenced by the descriptor does not exist."""

    def __init__(self, label: str, path: object) -> None:
        self.label = label
        self.path = path
        super().__init__(f"{label} '{path}' not found.")


class BrokenLinkError(RuntimeError):
    """Raised when navigation or markdown references cannot be resolved."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        listing = "\n".join(f"- {problem}" for problem in self.problems)
        super().__init__(f"Broken links found:\n{listing}")


class MalformedSpecError(ValueError):
    """Raised when an OpenAPI document cannot be parsed or fails validation."""


__all__ = [
    "BrokenLinkError",
    "MalformedSpecError",
    "MissingFieldError",
    "MissingFileError",
    "SiteConfigError",
]
