"""Declarative schema of everything groundwork installs into a project.

This package provides:
- models: Schema, OwnedFileDef, ManagedFileDef, JsonMergeDef, JsonKeyRule,
          MergePolicy, TextPatchDef, PackageCatalog
- conditions: evaluate_condition, conditions_hold
- builtin: build_schema, check_content_refs
"""

# Models
from groundwork.schema.models import (
    JsonKeyRule,
    JsonMergeDef,
    ManagedFileDef,
    MergePolicy,
    OwnedFileDef,
    PackageCatalog,
    Schema,
    TextPatchDef,
)

# Conditions
from groundwork.schema.conditions import (
    BUILTIN_FACTS,
    conditions_hold,
    evaluate_condition,
)

# Bundled schema
from groundwork.schema.builtin import (
    build_schema,
    check_content_refs,
)

__all__ = [
    "BUILTIN_FACTS",
    "JsonKeyRule",
    "JsonMergeDef",
    "ManagedFileDef",
    "MergePolicy",
    "OwnedFileDef",
    "PackageCatalog",
    "Schema",
    "TextPatchDef",
    "build_schema",
    "check_content_refs",
    "conditions_hold",
    "evaluate_condition",
]
