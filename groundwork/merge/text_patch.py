"""Marker-delimited text blocks.

A patch is a block of fixed text between a start and an end marker. It is
prepended to a host file (separated by a blank line) and can be removed again
leaving the rest of the file exactly as it was.

Contains:
- render_block: The full block, markers included
- has_patch: Check whether the current block is present
- apply_patch: Add or refresh the block
- remove_patch: Remove the block
"""

from typing import Optional

from groundwork.schema.models import TextPatchDef


SEPARATOR = "\n\n"


def render_block(definition: TextPatchDef) -> str:
    """Render the block as start marker, content and end marker lines."""
    return f"{definition.start_marker}\n{definition.content}\n{definition.end_marker}"


def has_patch(content: str, definition: TextPatchDef) -> bool:
    """Return True if the current block is present verbatim."""
    return render_block(definition) in content


def _find_region(content: str, definition: TextPatchDef) -> Optional[tuple[int, int]]:
    """Locate start..end markers, for blocks written by an older version."""
    start = content.find(definition.start_marker)
    if start == -1:
        return None
    end = content.find(definition.end_marker, start + len(definition.start_marker))
    if end == -1:
        return None
    return start, end + len(definition.end_marker)


def apply_patch(content: Optional[str], definition: TextPatchDef) -> Optional[str]:
    """Add the block to a file's content.

    Args:
        content: Current file content, or None if the file does not exist.
        definition: The patch definition.

    Returns:
        The patched content. None if the file does not exist and may not be
        created. Unchanged content if the block is already present.
    """
    block = render_block(definition)

    if content is None:
        return block + "\n" if definition.create_if_missing else None

    if has_patch(content, definition):
        return content

    region = _find_region(content, definition)
    if region is not None:
        start, end = region
        return content[:start] + block + content[end:]

    if not content:
        return block + "\n"

    return block + SEPARATOR + content


def remove_patch(content: str, definition: TextPatchDef) -> str:
    """Remove the block from a file's content.

    The block is removed together with the separator apply_patch added. When
    that exact form is not found (the user edited around it), the marker
    region is cut out and blank lines left at the top of the file trimmed.

    Returns:
        The content without the block. Unchanged if no block is present.
    """
    block = render_block(definition)

    prepended = block + SEPARATOR
    if prepended in content:
        return content.replace(prepended, "", 1)

    if has_patch(content, definition):
        start = content.find(block)
        end = start + len(block)
    else:
        region = _find_region(content, definition)
        if region is None:
            return content
        start, end = region

    remaining = content[:start] + content[end:]
    if start == 0:
        remaining = remaining.lstrip("\n")
    return remaining
