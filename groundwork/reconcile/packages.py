"""Package selection.

Uses the same condition keys as schema file entries, so a project gets a
package exactly when it gets the files that need it.

Contains:
- select_packages: Packages a mode should install or remove
"""

from groundwork.context import ProjectContext
from groundwork.reconcile.models import PackageSelection, ReconcileMode
from groundwork.schema.conditions import evaluate_condition
from groundwork.schema.models import Schema


def _wanted_packages(schema: Schema, context: ProjectContext) -> list[str]:
    """Base packages plus every conditional set whose condition holds, in schema order."""
    wanted: list[str] = []
    groups = [schema.packages.base]
    groups.extend(
        names
        for key, names in schema.packages.conditional.items()
        if evaluate_condition(key, context)
    )
    for names in groups:
        wanted.extend(name for name in names if name not in wanted)
    return wanted


def select_packages(
    schema: Schema, context: ProjectContext, mode: ReconcileMode
) -> PackageSelection:
    """Select the packages a mode installs and removes.

    Only packages groundwork itself would install are ever proposed for
    removal; anything else the project declares is left alone.

    Args:
        schema: Schema holding the package catalog.
        context: Project context (conditions and declared dependencies).
        mode: The reconcile mode.

    Returns:
        PackageSelection with to_install and to_remove in schema order.
    """
    declared = context.declared_dependencies()

    if mode is ReconcileMode.UNINSTALL:
        return PackageSelection()

    wanted = _wanted_packages(schema, context)

    if mode is ReconcileMode.UNINSTALL_FULL:
        return PackageSelection(to_remove=[name for name in wanted if name in declared])

    to_remove = []
    if mode is ReconcileMode.UPGRADE:
        to_remove = [name for name in schema.packages.deprecated if name in declared]

    return PackageSelection(
        to_install=[name for name in wanted if name not in declared],
        to_remove=to_remove,
    )
