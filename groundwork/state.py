"""Install state recorded in the host project.

The state file (.groundwork/state.yaml by default) remembers what the last
install or upgrade did, so later runs can tell groundwork's output apart
from the user's edits:
- version: groundwork version that wrote the state
- managed: fingerprint of each managed file as last written
- json: provenance of each JSON merge target
- patched_created: text-patch targets groundwork created from nothing
"""

from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from groundwork.merge.json_merge import JsonProvenance


class InstallState(BaseModel):
    """Contents of the install-state file."""

    version: Optional[str] = None
    managed: dict[str, str] = Field(default_factory=dict)
    json_: dict[str, JsonProvenance] = Field(default_factory=dict, alias="json")
    patched_created: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


def parse_state(text: str) -> Optional[InstallState]:
    """Parse the state file.

    Returns:
        InstallState, or None if the file is not a valid state document.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        return None

    if not isinstance(data, dict):
        return None

    try:
        return InstallState.model_validate(data)
    except ValidationError:
        return None


def dump_state(state: InstallState) -> str:
    """Serialize the state as YAML."""
    data = state.model_dump(mode="json", by_alias=True)
    header = "# Written by groundwork. Do not edit.\n"
    return header + yaml.dump(data, default_flow_style=False, sort_keys=False)
