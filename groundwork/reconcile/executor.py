"""Plan execution.

Applies a plan's actions in order. The first failing action stops execution;
actions already applied stay applied. Re-running the same mode computes only
what is left.

Contains:
- render_action: Content a file holds after an action
- execute_plan: Apply a plan to a filesystem
"""

import logging
from typing import Optional

from groundwork.exceptions import ActionFailedError
from groundwork.fs.base import Filesystem
from groundwork.merge.json_merge import (
    JsonLayout,
    dump_json_document,
    dump_unmerged,
    load_json_document,
    merge_json,
    unmerge_json,
)
from groundwork.merge.text_patch import apply_patch, remove_patch
from groundwork.reconcile.models import Action, ActionFailure, ExecutionResult, Plan


logger = logging.getLogger(__name__)


def render_action(action: Action, current: Optional[str]) -> Optional[str]:
    """Compute the content a file holds after an action.

    Args:
        action: A write, json or text patch action.
        current: The file's content before the action (None if absent).

    Returns:
        The new content, or None if the action leaves no file (rm, or a
        merge or patch with nothing to act on).

    Raises:
        ValueError: If a JSON target is not a valid JSON object.
    """
    if action.type == "write":
        return action.content

    if action.type == "json_merge":
        if current is None:
            doc, layout = None, JsonLayout()
        else:
            doc, layout = load_json_document(current)
        return dump_json_document(merge_json(doc, action.definition), layout)

    if action.type == "json_unmerge":
        if current is None:
            return None
        doc, layout = load_json_document(current)
        result = unmerge_json(doc, action.definition, action.provenance, deep=action.deep)
        return dump_unmerged(result, layout, action.provenance)

    if action.type == "text_patch_apply":
        return apply_patch(current, action.definition)

    if action.type == "text_patch_remove":
        return remove_patch(current, action.definition) if current is not None else None

    return None


def _apply(action: Action, filesystem: Filesystem) -> None:
    """Apply a single action."""
    if action.type == "mkdir":
        filesystem.mkdir(action.path)
        return

    if action.type == "rm":
        filesystem.remove(action.path, recursive=action.recursive)
        return

    current = None
    if action.type != "write":
        data = filesystem.read_file(action.path)
        current = data.decode("utf-8") if data is not None else None

    content = render_action(action, current)
    if content is not None and content != current:
        filesystem.write_file(action.path, content.encode("utf-8"))


def _run(action: Action, filesystem: Filesystem) -> None:
    """Apply an action, raising ActionFailedError if it fails."""
    try:
        _apply(action, filesystem)
    except (OSError, ValueError) as e:
        raise ActionFailedError(action.type, action.path, str(e), e) from e


def execute_plan(plan: Plan, filesystem: Filesystem) -> ExecutionResult:
    """Apply a plan's actions in order.

    Args:
        plan: The plan to apply.
        filesystem: Filesystem to apply it to.

    Returns:
        ExecutionResult with what was applied. If an action failed, failure
        describes it and the remaining actions were not attempted.
    """
    result = ExecutionResult()

    for action in plan.actions:
        try:
            _run(action, filesystem)
        except ActionFailedError as e:
            logger.debug("Stopping after failed action: %s", e)
            result.failure = ActionFailure(action_type=e.action_type, path=e.path, message=e.reason)
            break

        logger.debug("Applied %s %s", action.type, action.path)
        result.completed += 1
        if action.path in plan.created:
            result.created.append(action.path)
        elif action.path in plan.updated:
            result.updated.append(action.path)
        elif action.path in plan.removed:
            result.removed.append(action.path)

    return result
