"""Data models for the groundwork schema.

Contains:
- MergePolicy: How a JSON merge rule writes its value
- OwnedFileDef / ManagedFileDef: File entries rendered from the content store
- JsonKeyRule / JsonMergeDef: Reversible JSON merge definitions
- TextPatchDef: Marker-delimited text block definition
- PackageCatalog: Base, conditional and deprecated packages
- Schema: The full declarative description of a configured project

The Schema validates its own structure on construction and raises SchemaError
for orphaned paths, overlapping entries and malformed definitions.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from groundwork.context import ProjectContext
from groundwork.exceptions import SchemaError
from groundwork.fs.base import parent_path
from groundwork.schema.conditions import conditions_hold


class MergePolicy(str, Enum):
    """How a JSON merge rule applies its value."""

    SET_IF_ABSENT = "set_if_absent"  # Only set when the key is missing
    OVERWRITE = "overwrite"  # Always set; the previous value is remembered
    APPEND = "append"  # Append missing entries to an array


class OwnedFileDef(BaseModel):
    """A file exclusively managed by groundwork."""

    model_config = ConfigDict(frozen=True)

    content: str  # ContentRef, e.g. "template:guides/planning-guide.md"
    when: tuple[str, ...] = ()


class ManagedFileDef(BaseModel):
    """A file that is useful on its own but whose content groundwork generates."""

    model_config = ConfigDict(frozen=True)

    content: str
    when: tuple[str, ...] = ()


class JsonKeyRule(BaseModel):
    """A single key (or array) that a JSON merge owns."""

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...]
    value: Any
    policy: MergePolicy = MergePolicy.SET_IF_ABSENT
    # Dotted path inside array entries used to match them, e.g. "command" or
    # "hooks.0.command". None compares whole entries.
    identity: Optional[str] = None
    # Kept on a plain uninstall because the entry is useful on its own
    retain: bool = False
    when: tuple[str, ...] = ()

    @model_validator(mode="after")
    def check_shape(self) -> "JsonKeyRule":
        if not self.path or any(not part for part in self.path):
            raise SchemaError(f"JSON rule path must be non-empty: {self.path!r}")
        if self.policy is MergePolicy.APPEND and not isinstance(self.value, (list, tuple)):
            raise SchemaError(f"Append rule {'.'.join(self.path)} needs a list value")
        return self


class JsonMergeDef(BaseModel):
    """Keys merged into a JSON document, reversible via unmerge."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[JsonKeyRule, ...]
    create_if_missing: bool = True
    remove_file_if_empty: bool = False

    def resolve(self, context: ProjectContext) -> "JsonMergeDef":
        """Return a copy holding only the rules whose conditions hold."""
        active = tuple(rule for rule in self.rules if conditions_hold(rule.when, context))
        return self.model_copy(update={"rules": active})


class TextPatchDef(BaseModel):
    """A block of text delimited by fixed start/end markers."""

    model_config = ConfigDict(frozen=True)

    content: str
    start_marker: str
    end_marker: str
    create_if_missing: bool = False

    @model_validator(mode="after")
    def check_markers(self) -> "TextPatchDef":
        if not self.start_marker or not self.end_marker:
            raise SchemaError("Text patch markers must be non-empty")
        if self.start_marker == self.end_marker:
            raise SchemaError("Text patch start and end markers must differ")
        if self.start_marker in self.content or self.end_marker in self.content:
            raise SchemaError("Text patch content must not contain its own markers")
        return self


class PackageCatalog(BaseModel):
    """Packages groundwork installs into the host project."""

    model_config = ConfigDict(frozen=True)

    base: tuple[str, ...] = ()
    conditional: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    # Packages earlier versions installed and upgrade should remove
    deprecated: tuple[str, ...] = ()


def _path_problem(path: str) -> Optional[str]:
    if not path:
        return "empty path"
    if path.startswith("/") or "\\" in path:
        return "must be a project-relative POSIX path"
    if any(part in ("", ".", "..") for part in path.split("/")):
        return "must not contain empty, '.' or '..' components"
    return None


def _is_under(path: str, roots: set[str]) -> bool:
    return any(path == root or path.startswith(f"{root}/") for root in roots)


class Schema(BaseModel):
    """Declarative description of everything groundwork installs."""

    model_config = ConfigDict(frozen=True)

    version: str
    state_path: str = ".groundwork/state.yaml"
    owned_dirs: tuple[str, ...] = ()
    shared_dirs: tuple[str, ...] = ()
    preserved_dirs: tuple[str, ...] = ()
    deprecated_paths: tuple[str, ...] = ()
    owned_files: dict[str, OwnedFileDef] = Field(default_factory=dict)
    managed_files: dict[str, ManagedFileDef] = Field(default_factory=dict)
    json_merges: dict[str, JsonMergeDef] = Field(default_factory=dict)
    text_patches: dict[str, TextPatchDef] = Field(default_factory=dict)
    packages: PackageCatalog = Field(default_factory=PackageCatalog)

    @model_validator(mode="after")
    def check_structure(self) -> "Schema":
        problems: list[str] = []

        dir_groups = {
            "owned": self.owned_dirs,
            "shared": self.shared_dirs,
            "preserved": self.preserved_dirs,
        }
        seen_dirs: dict[str, str] = {}
        for group, dirs in dir_groups.items():
            for directory in dirs:
                problem = _path_problem(directory)
                if problem:
                    problems.append(f"{group} dir {directory!r}: {problem}")
                if directory in seen_dirs:
                    problems.append(
                        f"{directory} is listed as both {seen_dirs[directory]} and {group} dir"
                    )
                seen_dirs[directory] = group

        roots = set(self.owned_dirs) | set(self.shared_dirs)
        file_groups = {
            "owned file": self.owned_files,
            "managed file": self.managed_files,
            "json merge": self.json_merges,
            "text patch": self.text_patches,
        }
        seen_files: dict[str, str] = {}
        for group, entries in file_groups.items():
            for path in entries:
                problem = _path_problem(path)
                if problem:
                    problems.append(f"{group} {path!r}: {problem}")
                    continue
                if path in seen_files:
                    problems.append(f"{path} is defined as both {seen_files[path]} and {group}")
                if path in seen_dirs:
                    problems.append(f"{path} is defined as both a directory and a {group}")
                parent = parent_path(path)
                if parent and not _is_under(parent, roots):
                    problems.append(f"{group} {path} is not under an owned or shared directory")
                seen_files[path] = group

        if self.state_path in seen_files:
            problems.append(f"state file {self.state_path} collides with a {seen_files[self.state_path]}")
        if not _is_under(parent_path(self.state_path), set(self.owned_dirs)):
            problems.append(f"state file {self.state_path} must live in an owned directory")

        for path in self.deprecated_paths:
            problem = _path_problem(path)
            if problem:
                problems.append(f"deprecated path {path!r}: {problem}")
            if path in self.owned_files or path in seen_dirs or path == self.state_path:
                problems.append(f"deprecated path {path} is still owned by the current schema")

        if problems:
            raise SchemaError("Invalid schema:\n  " + "\n  ".join(problems))
        return self

    def all_dirs(self) -> list[str]:
        """Owned, shared and preserved directories, in declaration order."""
        return [*self.owned_dirs, *self.shared_dirs, *self.preserved_dirs]

    def content_refs(self) -> list[tuple[str, str]]:
        """Pairs of (file path, content ref) for every rendered file."""
        refs = [(path, definition.content) for path, definition in self.owned_files.items()]
        refs.extend((path, definition.content) for path, definition in self.managed_files.items())
        return refs
