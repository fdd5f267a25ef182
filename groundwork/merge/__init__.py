"""Merge and patch primitives used by the reconciler."""

from groundwork.merge.fingerprint import fingerprint
from groundwork.merge.json_merge import (
    JsonLayout,
    JsonProvenance,
    decode_pointer,
    dump_json_document,
    encode_pointer,
    load_json_document,
    merge_json,
    merge_json_tracked,
    resolve_identity,
    unmerge_json,
)
from groundwork.merge.text_patch import (
    SEPARATOR,
    apply_patch,
    has_patch,
    remove_patch,
    render_block,
)

__all__ = [
    "JsonLayout",
    "JsonProvenance",
    "SEPARATOR",
    "apply_patch",
    "decode_pointer",
    "dump_json_document",
    "encode_pointer",
    "fingerprint",
    "has_patch",
    "load_json_document",
    "merge_json",
    "merge_json_tracked",
    "remove_patch",
    "render_block",
    "resolve_identity",
    "unmerge_json",
]
