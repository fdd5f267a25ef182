"""Content store mapping content references to file content.

A content reference is a string of the form:
- "template:<relative path>": a static file under the templates directory
- "generated:<name>": output of a generator called with the ProjectContext

Contains:
- ContentStore: Resolves and renders content references
- parse_ref: Split a content reference into (kind, name)
"""

from importlib.resources import files
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Callable, Optional, Union

from groundwork.context import ProjectContext
from groundwork.exceptions import SchemaError


Generator = Callable[[ProjectContext], str]

TEMPLATE = "template"
GENERATED = "generated"


def parse_ref(ref: str) -> tuple[str, str]:
    """Split a content reference into its kind and name.

    Raises:
        SchemaError: If the reference is malformed.
    """
    kind, sep, name = ref.partition(":")
    if not sep or not name or kind not in (TEMPLATE, GENERATED):
        raise SchemaError(f"Invalid content reference: {ref!r}")
    return kind, name


class ContentStore:
    """Bundled templates plus named content generators."""

    def __init__(
        self,
        templates_root: Optional[Union[Path, Traversable]] = None,
        generators: Optional[dict[str, Generator]] = None,
    ):
        self.templates_root = templates_root
        self.generators = dict(generators or {})

    @classmethod
    def default(cls) -> "ContentStore":
        """Store backed by the templates and generators shipped with groundwork."""
        from groundwork.content.generators import GENERATORS

        return cls(files("groundwork") / "templates", GENERATORS)

    def _template(self, name: str) -> Optional[Traversable]:
        if self.templates_root is None:
            return None
        target = self.templates_root
        for part in name.split("/"):
            target = target.joinpath(part)
        return target if target.is_file() else None

    def has(self, ref: str) -> bool:
        """Return True if the reference resolves to content."""
        try:
            kind, name = parse_ref(ref)
        except SchemaError:
            return False
        if kind == GENERATED:
            return name in self.generators
        return self._template(name) is not None

    def render(self, ref: str, context: ProjectContext) -> str:
        """Render a content reference for a project.

        Args:
            ref: The content reference.
            context: Project context passed to generators.

        Returns:
            The file content.

        Raises:
            SchemaError: If the reference does not resolve.
        """
        kind, name = parse_ref(ref)
        if kind == GENERATED:
            generator = self.generators.get(name)
            if generator is None:
                raise SchemaError(f"Unknown content generator: {name}")
            return generator(context)

        template = self._template(name)
        if template is None:
            raise SchemaError(f"Template not found: {name}")
        return template.read_text(encoding="utf-8")
