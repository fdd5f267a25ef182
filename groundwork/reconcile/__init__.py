"""Reconciliation engine.

This package provides:
- models: ReconcileMode, Plan, the action models, PackageSelection,
          ExecutionResult, ReconcileResult
- planner: compute_plan
- executor: execute_plan
- packages: select_packages
- reconcile: Compute a plan and optionally apply it
"""

import logging

from groundwork.content.store import ContentStore
from groundwork.context import ProjectContext
from groundwork.exceptions import PlanComputationError
from groundwork.fs.base import Filesystem

# Models
from groundwork.reconcile.models import (
    Action,
    ActionFailure,
    ExecutionResult,
    JsonMergeAction,
    JsonUnmergeAction,
    MkdirAction,
    PackageSelection,
    Plan,
    ReconcileMode,
    ReconcileResult,
    RemoveAction,
    TextPatchApplyAction,
    TextPatchRemoveAction,
    WriteAction,
)
from groundwork.reconcile.executor import execute_plan, render_action
from groundwork.reconcile.packages import select_packages
from groundwork.reconcile.planner import compute_plan
from groundwork.schema.models import Schema


logger = logging.getLogger(__name__)


def reconcile(
    schema: Schema,
    mode: ReconcileMode,
    context: ProjectContext,
    filesystem: Filesystem,
    store: ContentStore,
    dry_run: bool = False,
) -> ReconcileResult:
    """Compute a plan for a mode and, unless dry_run, apply it.

    Failures come back in the result rather than as exceptions: a project
    that cannot be read yields a result with no plan, a failed action yields
    the plan with the partial execution.

    Args:
        schema: The schema to reconcile against.
        mode: The reconcile mode.
        context: Facts about the host project.
        filesystem: Filesystem to read and (unless dry_run) write.
        store: Content store for the schema's files.
        dry_run: Compute the plan only.

    Returns:
        ReconcileResult.
    """
    try:
        plan = compute_plan(schema, mode, context, filesystem, store)
    except PlanComputationError as e:
        logger.debug("Plan computation failed: %s", e)
        return ReconcileResult(mode=mode, error=str(e), dry_run=dry_run)

    if dry_run:
        return ReconcileResult(mode=mode, plan=plan, dry_run=True)

    execution = execute_plan(plan, filesystem)
    plan.applied = execution.ok
    return ReconcileResult(mode=mode, plan=plan, execution=execution)


__all__ = [
    "Action",
    "ActionFailure",
    "ExecutionResult",
    "JsonMergeAction",
    "JsonUnmergeAction",
    "MkdirAction",
    "PackageSelection",
    "Plan",
    "ReconcileMode",
    "ReconcileResult",
    "RemoveAction",
    "TextPatchApplyAction",
    "TextPatchRemoveAction",
    "WriteAction",
    "compute_plan",
    "execute_plan",
    "reconcile",
    "render_action",
    "select_packages",
]
