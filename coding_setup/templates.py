"""Bundled configuration templates.

Provides the ``TemplateRenderer`` which loads Jinja2 templates from the
``coding_setup/templates/`` directory and the ``TemplateStore`` which maps the
logical payload names used by the planner (``eslintrc``, ``gitignore``, ...)
to a template file and the path it is written to inside the target project.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .models import TemplatePayload


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# Logical name -> (template file, target path relative to the project root)
TEMPLATE_CATALOGUE: dict[str, tuple[str, str]] = {
    "eslintrc": ("eslintrc.json.j2", ".eslintrc.json"),
    "commitlint": ("commitlint.config.js.j2", "commitlint.config.js"),
    "editorconfig": ("editorconfig.j2", ".editorconfig"),
    "nvmrc": ("nvmrc.j2", ".nvmrc"),
    "tsconfig": ("tsconfig.json.j2", "tsconfig.json"),
    "gitignore": ("gitignore.j2", ".gitignore"),
}


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for the configuration payloads.

    Undefined variables raise instead of rendering as empty strings, so a
    missing context key can never produce a silently broken config file.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"tsconfig.json.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def list_templates(self) -> list[str]:
        """Return a sorted list of all ``.j2`` templates in the directory."""
        if not self.template_dir.is_dir():
            return []
        return sorted(
            str(p.relative_to(self.template_dir))
            for p in self.template_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# TemplateStore
# ---------------------------------------------------------------------------


class TemplateStore:
    """Read-only set of named payloads, rendered once per run.

    Payloads are rendered lazily on first access and cached, so the content a
    run writes never changes between two reads of the same name.
    """

    def __init__(
        self,
        context: dict[str, Any],
        renderer: TemplateRenderer | None = None,
        catalogue: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        self.context = dict(context)
        self.renderer = renderer or TemplateRenderer()
        self.catalogue = dict(catalogue or TEMPLATE_CATALOGUE)
        self._cache: dict[str, TemplatePayload] = {}

    def get(self, name: str) -> TemplatePayload:
        """Return the payload registered under *name*.

        Raises:
            KeyError: If *name* is not part of the catalogue.
        """
        if name not in self._cache:
            if name not in self.catalogue:
                raise KeyError(f"Unknown template payload: {name!r}")
            template_file, target_path = self.catalogue[name]
            self._cache[name] = TemplatePayload(
                name=name,
                content=self.renderer.render(template_file, self.context),
                target_path=target_path,
            )
        return self._cache[name]

    def load_all(self) -> dict[str, TemplatePayload]:
        """Render every catalogued payload and return them keyed by name."""
        return {name: self.get(name) for name in self.catalogue}
