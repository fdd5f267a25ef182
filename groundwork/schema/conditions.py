"""Condition evaluation for schema entries and package catalogs.

A condition key names a boolean fact about the project. A leading "!" negates
it. Keys that are not built-in facts are looked up in ProjectContext.project_type.

Contains:
- BUILTIN_FACTS: Condition keys that resolve to non-flag context fields
- evaluate_condition: Evaluate a single condition key
- conditions_hold: Evaluate a conjunction of condition keys
"""

from typing import Callable, Iterable

from groundwork.context import ProjectContext


BUILTIN_FACTS: dict[str, Callable[[ProjectContext], bool]] = {
    "git": lambda ctx: ctx.is_git_repo,
    "javascript": lambda ctx: ctx.languages.javascript,
    "python": lambda ctx: ctx.languages.python,
    "golang": lambda ctx: ctx.languages.golang,
}


def evaluate_condition(key: str, context: ProjectContext) -> bool:
    """Evaluate a condition key against a project context.

    Args:
        key: Fact name, optionally prefixed with "!".
        context: The project context.

    Returns:
        Whether the condition holds.
    """
    negated = key.startswith("!")
    name = key[1:] if negated else key

    fact = BUILTIN_FACTS.get(name)
    value = fact(context) if fact else context.flag(name)
    return not value if negated else value


def conditions_hold(keys: Iterable[str], context: ProjectContext) -> bool:
    """Return True when every key holds (an empty set always holds)."""
    return all(evaluate_condition(key, context) for key in keys)
