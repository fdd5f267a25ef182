"""Reversible JSON merges.

A merge writes the values of a JsonMergeDef into a document and records what
it did in a JsonProvenance. Unmerge reads that record back to remove exactly
what the merge added, restore values it overwrote and prune containers it
created. Without a record, unmerge falls back to removing by path shape.

Contains:
- JsonProvenance: What a merge added, appended and replaced
- merge_json / merge_json_tracked: Merge a definition into a document
- unmerge_json: Reverse a merge
- load_json_document / dump_json_document: Parse and serialize, keeping layout
- dump_unmerged: Serialize an unmerged document, reusing the pre-merge text
"""

import copy
import json
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from pydantic import BaseModel, Field

from groundwork.schema.models import JsonKeyRule, JsonMergeDef, MergePolicy


def encode_pointer(path: Sequence[str]) -> str:
    """Encode a key path as a JSON pointer (RFC 6901)."""
    return "".join("/" + part.replace("~", "~0").replace("/", "~1") for part in path)


def decode_pointer(pointer: str) -> tuple[str, ...]:
    """Decode a JSON pointer back into a key path."""
    if not pointer:
        return ()
    return tuple(
        part.replace("~1", "/").replace("~0", "~") for part in pointer[1:].split("/")
    )


def resolve_identity(entry: Any, identity: Optional[str]) -> Any:
    """Get the value an array entry is matched by.

    Args:
        entry: The array entry.
        identity: Dotted path inside the entry ("hooks.0.command"), or None
            to match the whole entry.

    Returns:
        The identity value, or the whole entry if the path does not resolve.
    """
    if identity is None:
        return entry

    value = entry
    for part in identity.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return entry
    return value


def identity_key(entry: Any, identity: Optional[str]) -> str:
    """Stable string key for an array entry's identity."""
    return json.dumps(resolve_identity(entry, identity), sort_keys=True)


class JsonProvenance(BaseModel):
    """Record of what a merge did to one document."""

    created: bool = False  # The document did not exist before the merge
    added: list[str] = Field(default_factory=list)  # Pointers to keys the merge created
    appended: dict[str, list[str]] = Field(default_factory=dict)  # Pointer -> identity keys
    replaced: dict[str, Any] = Field(default_factory=dict)  # Pointer -> previous value
    original: Optional[str] = None  # File text before the first merge that changed it

    def is_empty(self) -> bool:
        return not (self.created or self.added or self.appended or self.replaced)

    def combine(self, newer: "JsonProvenance") -> "JsonProvenance":
        """Fold a later merge's record into this one.

        The earlier record wins where both know a pointer: a value replaced
        twice is restored to what it was before the first merge.
        """
        appended = {pointer: list(keys) for pointer, keys in self.appended.items()}
        for pointer, keys in newer.appended.items():
            known = appended.setdefault(pointer, [])
            known.extend(key for key in keys if key not in known)

        return JsonProvenance(
            created=self.created or newer.created,
            added=self.added + [pointer for pointer in newer.added if pointer not in self.added],
            appended=appended,
            replaced={**newer.replaced, **self.replaced},
            original=self.original if self.original is not None else newer.original,
        )


def _ensure_parent(
    doc: dict, path: tuple[str, ...], added: list[str]
) -> Optional[dict]:
    """Walk to the object holding path's last key, creating missing objects."""
    node = doc
    for depth, key in enumerate(path[:-1]):
        if key not in node:
            node[key] = {}
            added.append(encode_pointer(path[: depth + 1]))
        node = node[key]
        if not isinstance(node, dict):
            return None
    return node


def _lookup_parent(doc: dict, path: tuple[str, ...]) -> Optional[dict]:
    node: Any = doc
    for key in path[:-1]:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node if isinstance(node, dict) else None


def merge_json_tracked(
    existing: Optional[dict], definition: JsonMergeDef
) -> tuple[dict, JsonProvenance]:
    """Merge a definition into a document and record what changed.

    Args:
        existing: The current document, or None if the file does not exist.
        definition: The merge definition (only its rules are applied; filter
            by condition beforehand with JsonMergeDef.resolve).

    Returns:
        Tuple of (merged document, provenance). The input is not modified.
    """
    doc = copy.deepcopy(existing) if existing is not None else {}
    added: list[str] = []
    appended: dict[str, list[str]] = {}
    replaced: dict[str, Any] = {}

    for rule in definition.rules:
        parent = _ensure_parent(doc, rule.path, added)
        if parent is None:
            # A non-object sits on the path; the user owns that shape
            continue

        key = rule.path[-1]
        pointer = encode_pointer(rule.path)
        value = copy.deepcopy(rule.value)

        if rule.policy is MergePolicy.APPEND:
            if key not in parent:
                parent[key] = []
                added.append(pointer)
            target = parent[key]
            if not isinstance(target, list):
                continue
            seen = {identity_key(entry, rule.identity) for entry in target}
            for entry in value:
                entry_key = identity_key(entry, rule.identity)
                if entry_key in seen:
                    continue
                target.append(entry)
                seen.add(entry_key)
                appended.setdefault(pointer, []).append(entry_key)
        elif key not in parent:
            parent[key] = value
            added.append(pointer)
        elif rule.policy is MergePolicy.OVERWRITE and parent[key] != value:
            replaced[pointer] = parent[key]
            parent[key] = value

    provenance = JsonProvenance(
        created=existing is None, added=added, appended=appended, replaced=replaced
    )
    return doc, provenance


def merge_json(existing: Optional[dict], definition: JsonMergeDef) -> dict:
    """Merge a definition into a document."""
    return merge_json_tracked(existing, definition)[0]


def _remove_appended(target: list, keys: list[str], identity: Optional[str]) -> None:
    # Entries the merge appended sit after any user entry with the same identity
    for entry_key in keys:
        for index in range(len(target) - 1, -1, -1):
            if identity_key(target[index], identity) == entry_key:
                del target[index]
                break


def _unmerge_rule(
    doc: dict, rule: JsonKeyRule, provenance: Optional[JsonProvenance]
) -> None:
    parent = _lookup_parent(doc, rule.path)
    key = rule.path[-1]
    if parent is None or key not in parent:
        return

    pointer = encode_pointer(rule.path)
    if rule.policy is MergePolicy.APPEND:
        target = parent[key]
        if not isinstance(target, list):
            return
        if provenance is not None:
            keys = provenance.appended.get(pointer, [])
        else:
            keys = [identity_key(entry, rule.identity) for entry in rule.value]
        _remove_appended(target, keys, rule.identity)
    elif provenance is None or pointer in provenance.added:
        del parent[key]
    elif pointer in provenance.replaced:
        parent[key] = copy.deepcopy(provenance.replaced[pointer])


def _prune_candidates(
    rules: Sequence[JsonKeyRule], provenance: Optional[JsonProvenance]
) -> list[str]:
    if provenance is not None:
        return list(provenance.added)
    candidates = []
    for rule in rules:
        for depth in range(1, len(rule.path) + 1):
            pointer = encode_pointer(rule.path[:depth])
            if pointer not in candidates:
                candidates.append(pointer)
    return candidates


def unmerge_json(
    doc: dict,
    definition: JsonMergeDef,
    provenance: Optional[JsonProvenance] = None,
    deep: bool = False,
) -> dict:
    """Reverse a merge.

    Args:
        doc: The current document.
        definition: The full merge definition (every rule, whatever its
            condition, so entries from an earlier context are removed too).
        provenance: Record from the merges that touched this document. None
            removes every key the definition names.
        deep: Also remove rules marked retain.

    Returns:
        The unmerged document. The input is not modified.
    """
    result = copy.deepcopy(doc)
    rules = [rule for rule in definition.rules if deep or not rule.retain]
    kept = {encode_pointer(rule.path) for rule in definition.rules if rule.retain and not deep}

    for rule in rules:
        _unmerge_rule(result, rule, provenance)

    candidates = _prune_candidates(rules, provenance)
    for pointer in sorted(candidates, key=lambda p: len(decode_pointer(p)), reverse=True):
        if pointer in kept:
            continue
        path = decode_pointer(pointer)
        parent = _lookup_parent(result, path)
        if parent is None:
            continue
        value = parent.get(path[-1])
        if isinstance(value, (dict, list)) and not value:
            del parent[path[-1]]

    return result


@dataclass(frozen=True)
class JsonLayout:
    """Formatting of a JSON file, kept so rewrites only change what they must."""

    indent: Union[int, str, None] = 2
    trailing_newline: bool = True
    newline: str = "\n"
    ensure_ascii: bool = False  # The file spells non-ASCII characters as \u escapes
    compact: bool = False  # Single-line file without spaces after separators


def detect_layout(text: str) -> JsonLayout:
    """Detect indentation, line endings and escaping from a JSON file's text."""
    indent: Union[int, str, None] = None
    for line in text.splitlines()[1:]:
        stripped = line.lstrip(" \t")
        if stripped and stripped != line:
            whitespace = line[: len(line) - len(stripped)]
            indent = "\t" if whitespace.startswith("\t") else len(whitespace)
            break
    if indent is None and text.strip() == "{}":
        indent = 2
    return JsonLayout(
        indent=indent,
        trailing_newline=text.endswith("\n"),
        newline="\r\n" if "\r\n" in text else "\n",
        ensure_ascii=text.isascii() and "\\u" in text,
        compact=indent is None and '":' in text and '": ' not in text,
    )


def load_json_document(text: str) -> tuple[dict, JsonLayout]:
    """Parse a JSON object document.

    Raises:
        ValueError: If the text is not valid JSON or not an object.
    """
    doc = json.loads(text)
    if not isinstance(doc, dict):
        raise ValueError(f"expected a JSON object, got {type(doc).__name__}")
    return doc, detect_layout(text)


def dump_json_document(doc: dict, layout: Optional[JsonLayout] = None) -> str:
    """Serialize a document using a layout (2-space indent by default)."""
    layout = layout or JsonLayout()
    separators = (",", ":") if layout.compact else None
    text = json.dumps(
        doc, indent=layout.indent, ensure_ascii=layout.ensure_ascii, separators=separators
    )
    if layout.trailing_newline:
        text += "\n"
    # json.dumps escapes newlines inside strings, so every raw one is a line break
    return text.replace("\n", layout.newline) if layout.newline != "\n" else text


def dump_unmerged(
    doc: dict, layout: Optional[JsonLayout], provenance: Optional[JsonProvenance]
) -> str:
    """Serialize an unmerged document.

    When the document is back to what the file held before groundwork first
    merged into it, the recorded text is returned as is, so uninstall
    restores the file byte for byte whatever its formatting.
    """
    if provenance is not None and provenance.original is not None:
        try:
            before = json.loads(provenance.original)
        except ValueError:
            before = None
        if before == doc:
            return provenance.original
    return dump_json_document(doc, layout)
