# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Coercion of source data into TreeRecord instances.

A TreeIndex accepts its records in several shapes:
- TreeRecord: copied, so the caller keeps no handle on stored records
- mapping: {'id': ..., 'parent': ..., **payload}
- tuple: (id, parent) or (id, parent, payload_dict)
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..record import TreeRecord


def load_record(source: Any) -> TreeRecord:
    """Convert a single source item into a TreeRecord.

    Args:
        source: TreeRecord, mapping, or (id, parent[, payload]) tuple.

    Returns:
        The TreeRecord for source.

    Raises:
        TypeError: If source has an unsupported type.
        ValueError: If a mapping has no 'id' or a tuple has a wrong length.
    """
    if isinstance(source, TreeRecord):
        return TreeRecord(source.id, source.parent, source.attr)
    if isinstance(source, Mapping):
        return TreeRecord.from_dict(source)
    if isinstance(source, tuple):
        if len(source) == 2:
            item_id, parent = source
            return TreeRecord(item_id, parent)
        if len(source) == 3:
            item_id, parent, payload = source
            return TreeRecord(item_id, parent, payload)
        raise ValueError(
            f"record tuple must be (id, parent) or (id, parent, attr), got {len(source)} items"
        )
    raise TypeError(
        f"record must be TreeRecord, mapping, or tuple, not {type(source).__name__}"
    )


def load_from_list(source: Iterable[Any]) -> list[TreeRecord]:
    """Convert an iterable of source items into a new list of records.

    The returned list is always a fresh object, never the caller's sequence.
    """
    return [load_record(item) for item in source]
