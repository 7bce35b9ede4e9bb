"""Invoke configured plugins and collect the pages they generate."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .config import OpenApiDocsPlugin
from .errors import SiteConfigError
from .openapi import ApiDocsGenerator

if typ.TYPE_CHECKING:
    from pathlib import Path

    import requests

    from .build import BuildContext
    from .config import ApiSpecConfig


@dc.dataclass(frozen=True, slots=True)
class PluginRun:
    """Output of one generator invocation."""

    plugin_id: str
    api_id: str
    written: tuple[Path, ...]
    doc_ids: tuple[str, ...]


class PluginInvoker:
    """Run every plugin entry in declaration order.

    A failing plugin aborts the whole run: later plugins are not invoked and
    the failing generator leaves no output directory behind.
    """

    def __init__(
        self, context: BuildContext, *, session: requests.Session | None = None
    ) -> None:
        self.context = context
        self.config = context.config
        self.session = session

    def generators(self, api_id: str | None = None) -> list[tuple[str, ApiDocsGenerator]]:
        """Return ``(plugin_id, generator)`` pairs, optionally for one API."""
        pairs: list[tuple[str, ApiDocsGenerator]] = []
        for entry in self.config.plugins:
            match entry:
                case OpenApiDocsPlugin(id=plugin_id, config=apis):
                    pairs.extend(
                        (plugin_id, self._generator(spec))
                        for spec in apis.values()
                        if api_id is None or spec.api_id == api_id
                    )
        if api_id is not None and not pairs:
            known = ", ".join(spec.api_id for spec in self.config.api_specs()) or "none"
            msg = f"Unknown API '{api_id}'. Known APIs: {known}"
            raise SiteConfigError(msg)
        return pairs

    def run(self, api_id: str | None = None) -> list[PluginRun]:
        """Generate pages for every configured API (or only ``api_id``)."""
        runs: list[PluginRun] = []
        for plugin_id, generator in self.generators(api_id):
            written = generator.run()
            runs.append(
                PluginRun(
                    plugin_id=plugin_id,
                    api_id=generator.spec.api_id,
                    written=tuple(written),
                    doc_ids=tuple(generator.generated_doc_ids()),
                )
            )
        return runs

    def validate(self) -> list[str]:
        """Render every API in memory and return the doc ids it would produce."""
        doc_ids: list[str] = []
        for _, generator in self.generators():
            doc_ids.extend(page.doc_id for page in generator.render())
        return doc_ids

    def clean(self, api_id: str | None = None) -> list[Path]:
        """Remove generated output; return the directories that were removed."""
        return [
            generator.output_dir
            for _, generator in self.generators(api_id)
            if generator.clean()
        ]

    def _generator(self, spec: ApiSpecConfig) -> ApiDocsGenerator:
        return ApiDocsGenerator(
            spec, docs_dir=self.config.docs_dir, session=self.session
        )


__all__ = ["PluginInvoker", "PluginRun"]
