"""Content store for groundwork.

This package provides:
- store: ContentStore, parse_ref
- generators: GENERATORS and the generator functions
- constants: Inline content (agent instructions block, hook registrations, MCP servers)
"""

from groundwork.content.store import ContentStore, parse_ref
from groundwork.content.generators import GENERATORS


__all__ = [
    "ContentStore",
    "GENERATORS",
    "parse_ref",
]
