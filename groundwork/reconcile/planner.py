"""Plan computation.

compute_plan diffs the state a schema describes against what the project
holds and returns the actions that close the gap. It only reads, through the
reader it is given, so it is safe for previews and checks.

Contains:
- compute_plan: Build the plan for one mode
"""

import logging
from typing import Callable, Optional, TypeVar

from groundwork.content.store import ContentStore
from groundwork.context import ProjectContext
from groundwork.exceptions import PlanComputationError
from groundwork.fs.base import FilesystemReader, join_path, parent_path, path_depth
from groundwork.merge.fingerprint import fingerprint
from groundwork.merge.json_merge import load_json_document, merge_json_tracked, unmerge_json
from groundwork.merge.text_patch import apply_patch, remove_patch
from groundwork.reconcile.models import (
    JsonMergeAction,
    JsonUnmergeAction,
    MkdirAction,
    Plan,
    ReconcileMode,
    RemoveAction,
    TextPatchApplyAction,
    TextPatchRemoveAction,
    WriteAction,
)
from groundwork.reconcile.packages import select_packages
from groundwork.schema.conditions import conditions_hold
from groundwork.schema.models import Schema
from groundwork.state import InstallState, dump_state, parse_state


logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Reader:
    """Reader wrapper turning read failures into PlanComputationError."""

    def __init__(self, reader: FilesystemReader):
        self.reader = reader

    def _call(self, path: str, query: Callable[[str], T]) -> T:
        try:
            return query(path)
        except OSError as e:
            raise PlanComputationError(path, e.strerror or str(e)) from e

    def exists(self, path: str) -> bool:
        return self._call(path, self.reader.exists)

    def is_dir(self, path: str) -> bool:
        return self._call(path, self.reader.is_dir)

    def is_file(self, path: str) -> bool:
        return self.exists(path) and not self.is_dir(path)

    def list_dir(self, path: str) -> list[str]:
        return self._call(path, self.reader.list_dir)

    def is_dir_empty(self, path: str) -> bool:
        return self._call(path, self.reader.is_dir_empty)

    def read_text(self, path: str) -> Optional[str]:
        data = self._call(path, self.reader.read_file)
        if data is None:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PlanComputationError(path, f"not valid UTF-8 ({e.reason})") from e


class _Planner:
    """Builds one plan. Not reusable."""

    def __init__(
        self,
        schema: Schema,
        mode: ReconcileMode,
        context: ProjectContext,
        reader: FilesystemReader,
        store: ContentStore,
    ):
        self.schema = schema
        self.mode = mode
        self.context = context
        self.read = _Reader(reader)
        self.store = store
        self.plan = Plan(mode=mode)
        self.previous: Optional[InstallState] = None
        # Paths the plan removes, consulted when deciding which dirs can go
        self.going_away: set[str] = set()

    def build(self) -> Plan:
        self.previous = self._load_state()

        if self.mode.removes:
            self._plan_uninstall()
        else:
            self._plan_install()

        selection = select_packages(self.schema, self.context, self.mode)
        self.plan.packages_to_install = selection.to_install
        self.plan.packages_to_remove = selection.to_remove
        return self.plan

    # -- helpers ----------------------------------------------------------

    def _load_state(self) -> Optional[InstallState]:
        text = self.read.read_text(self.schema.state_path)
        if text is None:
            return None
        state = parse_state(text)
        if state is None:
            logger.debug("Ignoring unreadable state file %s", self.schema.state_path)
        return state

    def _write(self, path: str, content: str, existed: bool) -> None:
        self.plan.actions.append(WriteAction(path=path, content=content))
        (self.plan.updated if existed else self.plan.created).append(path)

    def _remove(self, path: str, recursive: bool = False) -> None:
        self.plan.actions.append(RemoveAction(path=path, recursive=recursive))
        self.plan.removed.append(path)
        self.going_away.add(path)

    def _skip(self, path: str, reason: str) -> None:
        logger.debug("Skipping %s: %s", path, reason)
        self.plan.skipped.append(path)
        self.plan.warnings.append(f"{path} {reason}; left untouched")

    def _active(self, when: tuple[str, ...]) -> bool:
        return conditions_hold(when, self.context)

    # -- install / upgrade -------------------------------------------------

    def _plan_install(self) -> None:
        state = InstallState(version=self.schema.version)

        if self.mode is ReconcileMode.UPGRADE:
            self._plan_deprecated()
        self._plan_dirs()
        self._plan_owned_files()
        self._plan_managed_files(state)
        self._plan_json_merges(state)
        self._plan_text_patches(state)
        self._plan_state(state)

    def _plan_deprecated(self) -> None:
        current = set(self.schema.owned_files) | set(self.schema.all_dirs())
        for path in self.schema.deprecated_paths:
            if path in current or not self.read.exists(path):
                continue
            self._remove(path, recursive=self.read.is_dir(path))

    def _plan_dirs(self) -> None:
        # Stable sort keeps declaration order within a depth; parents come first
        for path in sorted(self.schema.all_dirs(), key=path_depth):
            if not self.read.is_dir(path):
                self.plan.actions.append(MkdirAction(path=path))
                self.plan.created.append(path)

    def _plan_owned_files(self) -> None:
        for path, definition in self.schema.owned_files.items():
            if not self._active(definition.when):
                continue
            content = self.store.render(definition.content, self.context)
            current = self.read.read_text(path)
            if current is None:
                self._write(path, content, existed=False)
            elif current != content:
                self._write(path, content, existed=True)

    def _plan_managed_files(self, state: InstallState) -> None:
        recorded = self.previous.managed if self.previous else {}

        for path, definition in self.schema.managed_files.items():
            if not self._active(definition.when):
                if path in recorded and self.read.exists(path):
                    state.managed[path] = recorded[path]
                continue

            content = self.store.render(definition.content, self.context)
            current = self.read.read_text(path)

            if current is None:
                self._write(path, content, existed=False)
                state.managed[path] = fingerprint(content)
            elif current == content:
                state.managed[path] = fingerprint(content)
            elif self.mode is ReconcileMode.INSTALL:
                # Install never overwrites a file that is already there
                if path in recorded:
                    state.managed[path] = recorded[path]
            elif recorded.get(path) == fingerprint(current):
                self._write(path, content, existed=True)
                state.managed[path] = fingerprint(content)
            else:
                self._skip(path, "was modified by hand")
                if path in recorded:
                    state.managed[path] = recorded[path]

    def _plan_json_merges(self, state: InstallState) -> None:
        recorded = self.previous.json_ if self.previous else {}

        for path, definition in self.schema.json_merges.items():
            active = definition.resolve(self.context)
            previous = recorded.get(path)
            current = self.read.read_text(path)

            if current is None:
                if not definition.create_if_missing or not active.rules:
                    continue
                _, provenance = merge_json_tracked(None, active)
                self.plan.actions.append(JsonMergeAction(path=path, definition=active))
                self.plan.created.append(path)
                state.json_[path] = provenance
                continue

            try:
                doc, _ = load_json_document(current)
            except ValueError:
                self._skip(path, "is not a valid JSON object")
                if previous is not None:
                    state.json_[path] = previous
                continue

            merged, provenance = merge_json_tracked(doc, active)
            if merged != doc:
                # Kept so uninstall can put back the exact bytes
                provenance = provenance.model_copy(update={"original": current})
                self.plan.actions.append(JsonMergeAction(path=path, definition=active))
                self.plan.updated.append(path)

            if previous is not None:
                state.json_[path] = previous.combine(provenance)
            elif not provenance.is_empty():
                state.json_[path] = provenance

    def _plan_text_patches(self, state: InstallState) -> None:
        recorded = self.previous.patched_created if self.previous else []

        for path, definition in self.schema.text_patches.items():
            current = self.read.read_text(path)
            patched = apply_patch(current, definition)

            if current is not None and path in recorded:
                state.patched_created.append(path)

            if patched is None or patched == current:
                continue

            self.plan.actions.append(TextPatchApplyAction(path=path, definition=definition))
            if current is None:
                self.plan.created.append(path)
                state.patched_created.append(path)
            else:
                self.plan.updated.append(path)

    def _plan_state(self, state: InstallState) -> None:
        if state == self.previous:
            return
        logger.debug("Install state changed; writing %s", self.schema.state_path)
        self.plan.actions.append(WriteAction(path=self.schema.state_path, content=dump_state(state)))

    # -- uninstall ---------------------------------------------------------

    def _plan_uninstall(self) -> None:
        full = self.mode is ReconcileMode.UNINSTALL_FULL

        for path in self.schema.owned_files:
            if self.read.is_file(path):
                self._remove(path)

        current = set(self.schema.owned_files) | set(self.schema.all_dirs())
        for path in self.schema.deprecated_paths:
            if path not in current and self.read.exists(path):
                self._remove(path, recursive=self.read.is_dir(path))

        if full:
            for path in self.schema.managed_files:
                if self.read.is_file(path):
                    self._remove(path)

        self._plan_json_unmerges(deep=full)
        self._plan_text_patch_removals()

        if self.read.is_file(self.schema.state_path):
            self.plan.actions.append(RemoveAction(path=self.schema.state_path))
            self.going_away.add(self.schema.state_path)

        self._plan_dir_removals()

    def _plan_json_unmerges(self, deep: bool) -> None:
        recorded = self.previous.json_ if self.previous else {}

        for path, definition in self.schema.json_merges.items():
            current = self.read.read_text(path)
            if current is None:
                continue
            try:
                doc, _ = load_json_document(current)
            except ValueError:
                self._skip(path, "is not a valid JSON object")
                continue

            provenance = recorded.get(path)
            result = unmerge_json(doc, definition, provenance, deep=deep)
            if provenance is not None:
                created = provenance.created
            else:
                # No record: a full uninstall assumes files it may create were its own
                created = deep and definition.create_if_missing

            if not result and (created or definition.remove_file_if_empty):
                self._remove(path)
            elif result != doc:
                self.plan.actions.append(
                    JsonUnmergeAction(path=path, definition=definition, provenance=provenance, deep=deep)
                )
                self.plan.updated.append(path)

    def _plan_text_patch_removals(self) -> None:
        created = self.previous.patched_created if self.previous else None

        for path, definition in self.schema.text_patches.items():
            current = self.read.read_text(path)
            if current is None:
                continue
            remaining = remove_patch(current, definition)
            if remaining == current:
                continue
            # Without a state file, a file holding nothing but the block was ours
            if not remaining and (created is None or path in created):
                self._remove(path)
            else:
                self.plan.actions.append(TextPatchRemoveAction(path=path, definition=definition))
                self.plan.updated.append(path)

    def _removal_candidates(self) -> set[str]:
        classified = set(self.schema.all_dirs())
        candidates = set(self.schema.owned_dirs) | set(self.schema.preserved_dirs)

        # Unclassified parents of owned files (e.g. a skill's own folder)
        for path in self.schema.owned_files:
            parent = parent_path(path)
            while parent and parent not in classified:
                candidates.add(parent)
                parent = parent_path(parent)
        return candidates

    def _plan_dir_removals(self) -> None:
        candidates = self._removal_candidates()
        shared = set(self.schema.shared_dirs)
        preserved = set(self.schema.preserved_dirs)
        verdicts: dict[str, bool] = {}

        def removable(path: str) -> bool:
            if path in verdicts:
                return verdicts[path]
            if path in shared:
                verdict = False
            elif not self.read.is_dir(path):
                verdict = True
            elif path in preserved:
                # User data: only removable when nothing but our own removals is left
                verdict = self.read.is_dir_empty(path) or all(
                    join_path(path, name) in self.going_away for name in self.read.list_dir(path)
                )
            else:
                verdict = True
                for name in self.read.list_dir(path):
                    child = join_path(path, name)
                    if child in self.going_away:
                        continue
                    if child in candidates and self.read.is_dir(child) and removable(child):
                        continue
                    verdict = False
                    break
            verdicts[path] = verdict
            return verdict

        ordered = sorted(candidates, key=lambda p: (-path_depth(p), p))
        for path in ordered:
            if path in self.going_away or not removable(path):
                continue
            if self.read.is_dir(path):
                self._remove(path)


def compute_plan(
    schema: Schema,
    mode: ReconcileMode,
    context: ProjectContext,
    reader: FilesystemReader,
    store: ContentStore,
) -> Plan:
    """Compute the actions that bring a project to the state a schema describes.

    Args:
        schema: The schema to reconcile against.
        mode: install, upgrade, uninstall or uninstall-full.
        context: Facts about the host project.
        reader: Read-only view of the project.
        store: Content store the schema's files are rendered from.

    Returns:
        The plan. Nothing is written.

    Raises:
        PlanComputationError: If the project cannot be read.
    """
    logger.debug("Computing %s plan for %s", mode.value, context.cwd)
    plan = _Planner(schema, mode, context, reader, store).build()
    logger.debug(
        "Plan: %d actions, %d created, %d updated, %d removed, %d skipped",
        len(plan.actions),
        len(plan.created),
        len(plan.updated),
        len(plan.removed),
        len(plan.skipped),
    )
    return plan
