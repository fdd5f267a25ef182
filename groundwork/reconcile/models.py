"""Data models for plans and their results.

Contains:
- ReconcileMode: install, upgrade, uninstall, uninstall-full
- MkdirAction / WriteAction / RemoveAction / JsonMergeAction / JsonUnmergeAction /
  TextPatchApplyAction / TextPatchRemoveAction: The closed set of plan actions
- Plan: Ordered actions plus summaries
- PackageSelection: Packages to install and remove
- ActionFailure / ExecutionResult: Outcome of applying a plan
- ReconcileResult: Outcome of reconcile(), successful or not
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from groundwork.merge.json_merge import JsonProvenance
from groundwork.schema.models import JsonMergeDef, TextPatchDef


class ReconcileMode(str, Enum):
    """What a plan does to the project."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    UNINSTALL = "uninstall"
    UNINSTALL_FULL = "uninstall-full"

    @property
    def removes(self) -> bool:
        return self in (ReconcileMode.UNINSTALL, ReconcileMode.UNINSTALL_FULL)


class MkdirAction(BaseModel):
    type: Literal["mkdir"] = "mkdir"
    path: str


class WriteAction(BaseModel):
    type: Literal["write"] = "write"
    path: str
    content: str


class RemoveAction(BaseModel):
    type: Literal["rm"] = "rm"
    path: str
    recursive: bool = False


class JsonMergeAction(BaseModel):
    """Merge a definition (already filtered by condition) into a JSON file."""

    type: Literal["json_merge"] = "json_merge"
    path: str
    definition: JsonMergeDef


class JsonUnmergeAction(BaseModel):
    """Reverse a merge, using provenance from the state file when there is one."""

    type: Literal["json_unmerge"] = "json_unmerge"
    path: str
    definition: JsonMergeDef
    provenance: Optional[JsonProvenance] = None
    deep: bool = False


class TextPatchApplyAction(BaseModel):
    type: Literal["text_patch_apply"] = "text_patch_apply"
    path: str
    definition: TextPatchDef


class TextPatchRemoveAction(BaseModel):
    type: Literal["text_patch_remove"] = "text_patch_remove"
    path: str
    definition: TextPatchDef


Action = Annotated[
    Union[
        MkdirAction,
        WriteAction,
        RemoveAction,
        JsonMergeAction,
        JsonUnmergeAction,
        TextPatchApplyAction,
        TextPatchRemoveAction,
    ],
    Field(discriminator="type"),
]


class Plan(BaseModel):
    """Ordered actions for one mode, plus what they add up to."""

    mode: ReconcileMode
    actions: list[Action] = Field(default_factory=list)
    created: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)  # Hand-edited or unparsable files left untouched
    warnings: list[str] = Field(default_factory=list)
    packages_to_install: list[str] = Field(default_factory=list)
    packages_to_remove: list[str] = Field(default_factory=list)
    applied: bool = False


class PackageSelection(BaseModel):
    """Packages a mode proposes to install or remove."""

    to_install: list[str] = Field(default_factory=list)
    to_remove: list[str] = Field(default_factory=list)


class ActionFailure(BaseModel):
    """The action that stopped plan execution."""

    action_type: str
    path: str
    message: str


class ExecutionResult(BaseModel):
    """What execute_plan managed to do."""

    completed: int = 0  # Number of actions applied
    created: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    failure: Optional[ActionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class ReconcileResult(BaseModel):
    """Outcome of reconcile().

    A failed plan computation has plan=None and error set. A failed execution
    has the plan, the partial execution and its failure.
    """

    mode: ReconcileMode
    plan: Optional[Plan] = None
    execution: Optional[ExecutionResult] = None
    error: Optional[str] = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        if self.error is not None or self.plan is None:
            return False
        return self.execution is None or self.execution.ok
