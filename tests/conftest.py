"""Shared test fixtures and configuration."""

import tempfile
from pathlib import Path

import pytest

from groundwork.content.store import ContentStore
from groundwork.context import Languages, ProjectContext
from groundwork.fs.memory import MemoryFilesystem
from groundwork.reconcile import ReconcileMode, reconcile
from groundwork.schema.builtin import build_schema


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def groundwork_home(temp_dir, monkeypatch):
    """Point the user configuration at a temporary directory."""
    home = temp_dir / ".groundwork-home"
    monkeypatch.setenv("GROUNDWORK_HOME", str(home))
    return home


@pytest.fixture
def store():
    """Content store with the bundled templates and generators."""
    return ContentStore.default()


@pytest.fixture
def schema(store):
    """The bundled schema, pinned to a fixed version."""
    return build_schema(store, version="1.0.0")


@pytest.fixture
def memory_fs():
    """Empty in-memory project."""
    return MemoryFilesystem()


@pytest.fixture
def make_context():
    """Factory for ProjectContext snapshots.

    A JavaScript project with no project-type flags unless told otherwise.
    """

    def _make(
        flags=None,
        javascript=True,
        python=False,
        golang=False,
        git=False,
        dev_deps=None,
        prod_deps=None,
    ):
        return ProjectContext(
            cwd=Path("/project"),
            project_type=dict(flags or {}),
            development_deps=dict(dev_deps or {}),
            production_deps=dict(prod_deps or {}),
            is_git_repo=git,
            languages=Languages(javascript=javascript, python=python, golang=golang),
        )

    return _make


@pytest.fixture
def run(schema, store):
    """Reconcile a filesystem for a mode and return the result."""

    def _run(mode, context, filesystem, dry_run=False, with_schema=None, with_store=None):
        return reconcile(
            with_schema or schema,
            ReconcileMode(mode),
            context,
            filesystem,
            with_store or store,
            dry_run=dry_run,
        )

    return _run
