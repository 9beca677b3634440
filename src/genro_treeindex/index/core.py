# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex - An in-memory hierarchical index over flat records.

This module provides the TreeIndex class, the core container of the
genro-treeindex library. Records are stored flat, in insertion order, each
pointing to its parent by id. Three derived maps are kept in lockstep with
every mutation so that ancestry and descendant queries never have to walk
the collection. Only removal and the in-place write of update_item are
linear in the number of records.

Key Features:
    - **O(1) lookup**: dict-based access by id
    - **Child links**: direct children in attach order, without scanning
    - **Subtree queries**: breadth-first descendants, ancestor chains
    - **Cascading removal**: removing a record removes its whole subtree
    - **Re-parenting**: updating 'parent' moves a record with its subtree

Error Modes:
    By default a duplicate id on add_item or an unknown id on update_item
    is reported through the return value and logged as a warning. With
    raise_on_error=True the index raises DuplicateIdError or
    ItemNotFoundError instead. State is left unchanged in both modes.

Example:
    Basic usage::

        index = TreeIndex([
            {'id': 1, 'parent': None, 'label': 'Root'},
            {'id': 2, 'parent': 1, 'label': 'A'},
            {'id': 3, 'parent': 1, 'label': 'B'},
            {'id': 4, 'parent': 2, 'label': 'C'},
        ])

        [r.id for r in index.get_all_children(1)]  # [2, 3, 4]
        [r.id for r in index.get_all_parents(4)]   # [4, 2, 1]

        index.update_item(id=4, parent=3)          # move C under B
        index.remove_item(2)                       # removes A
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Hashable, Iterable, Iterator, Mapping

from ..exceptions import DuplicateIdError, ItemNotFoundError, TreeIndexError
from ..record import TreeRecord
from .loading import load_from_list, load_record

logger = logging.getLogger(__name__)


class TreeIndex:
    """A flat collection of records indexed as a hierarchy.

    TreeIndex provides:
    - get_all() / get_item(id): Full scan and O(1) lookup
    - get_children(id) / get_all_children(id): Direct and transitive children
    - get_all_parents(id): The record followed by its ancestor chain
    - add_item / update_item / remove_item: Mutations keeping the maps consistent

    Parent references are never validated: a record may point to an id that
    is not in the index (a dangling parent), and update_item may create a
    cycle. Traversals stop at missing ids and never visit an id twice, so
    every query terminates.

    The index is not thread safe. Callers sharing one index between threads
    must hold a single lock around every call.

    Example:
        >>> index = TreeIndex([(1, None, {'label': 'Root'}), (2, 1)])
        >>> index.get_children(1)
        [TreeRecord(2, parent=1, attr={})]
    """

    __slots__ = (
        '_records', '_by_id', '_parent_of', '_children_of',
        '_raise_on_error',
    )

    def __init__(
        self,
        source: Iterable[Any] | TreeIndex | None = None,
        raise_on_error: bool = False,
    ) -> None:
        """Initialize a TreeIndex.

        Args:
            source: Optional initial records. Can be:
                - iterable of TreeRecord, mappings or (id, parent[, attr]) tuples
                - TreeIndex: Copy the records of another index
                The caller's sequence is copied, never aliased. Duplicate ids
                keep their first occurrence.
            raise_on_error: If True, add_item raises DuplicateIdError and
                update_item raises ItemNotFoundError. If False (default),
                both conditions are logged and reported through the return
                value.

        Example:
            >>> TreeIndex([{'id': 1, 'parent': None, 'label': 'Root'}])
            >>> TreeIndex([(1, None), (2, 1, {'label': 'child'})])
            >>> TreeIndex(other_index)  # copy
            >>> TreeIndex(raise_on_error=True)  # strict mode
        """
        self._records: list[TreeRecord] = []
        self._by_id: dict[Hashable, TreeRecord] = {}
        self._parent_of: dict[Hashable, Hashable | None] = {}
        self._children_of: dict[Hashable, list[Hashable]] = {}
        self._raise_on_error = raise_on_error

        if source is not None:
            self._init_maps(self._load_source(source))
            logger.debug("TreeIndex built with %d records", len(self._records))

    def _load_source(self, source: Iterable[Any] | TreeIndex) -> list[TreeRecord]:
        """Convert source into a fresh list of records.

        Raises:
            TypeError: If source is not an iterable of records or a TreeIndex.
        """
        if isinstance(source, (Mapping, str, bytes)) or not isinstance(source, Iterable):
            raise TypeError(
                f"source must be an iterable of records or a TreeIndex, "
                f"not {type(source).__name__}"
            )
        return load_from_list(source)

    # ==================== Map Maintenance ====================

    def _link_child(self, parent_id: Hashable | None, item_id: Hashable) -> None:
        """Append item_id to the children of parent_id (roots are not linked)."""
        if parent_id is None:
            return
        self._children_of.setdefault(parent_id, []).append(item_id)

    def _unlink_child(self, parent_id: Hashable | None, item_id: Hashable) -> None:
        """Remove item_id from the children of parent_id, dropping empty lists."""
        if parent_id is None:
            return
        children = self._children_of.get(parent_id)
        if not children:
            return
        remaining = [child_id for child_id in children if child_id != item_id]
        if remaining:
            self._children_of[parent_id] = remaining
        else:
            del self._children_of[parent_id]

    def _index_record(self, record: TreeRecord) -> None:
        """Append record to the collection and register it in every map."""
        self._records.append(record)
        self._by_id[record.id] = record
        self._parent_of[record.id] = record.parent
        self._link_child(record.parent, record.id)

    def _init_maps(self, records: list[TreeRecord]) -> None:
        """Rebuild the collection and all derived maps from records.

        One linear pass. A record whose id was already seen is dropped.
        """
        self._records = []
        self._by_id = {}
        self._parent_of = {}
        self._children_of = {}

        for record in records:
            if record.id in self._by_id:
                logger.warning("Dropping record with duplicate id %r", record.id)
                continue
            self._index_record(record)

    def _report(self, error: TreeIndexError, result: Any) -> Any:
        """Raise error in strict mode, otherwise log it and return result."""
        if self._raise_on_error:
            raise error
        logger.warning("%s", error)
        return result

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing record ids."""
        return f"TreeIndex({list(self._by_id.keys())})"

    def __len__(self) -> int:
        """Return the number of records in the index."""
        return len(self._records)

    def __iter__(self) -> Iterator[TreeRecord]:
        """Iterate over records in insertion order."""
        return iter(self._records)

    def __contains__(self, item_id: Hashable) -> bool:
        """Check if a record with item_id exists."""
        return item_id in self._by_id

    @property
    def raise_on_error(self) -> bool:
        """True if rejected mutations raise instead of returning a flag."""
        return self._raise_on_error

    # ==================== Queries ====================

    def get_all(self) -> list[TreeRecord]:
        """Return a copy of all records in insertion order."""
        return list(self._records)

    def get_item(self, item_id: Hashable, default: Any = None) -> TreeRecord | None:
        """Return the record with item_id, or default if unknown."""
        return self._by_id.get(item_id, default)

    def get_children(self, item_id: Hashable) -> list[TreeRecord]:
        """Return the direct children of item_id in the order they were attached.

        Unknown ids and leaves both return an empty list.
        """
        result: list[TreeRecord] = []
        for child_id in self._children_of.get(item_id, ()):
            child = self._by_id.get(child_id)
            if child is not None:
                result.append(child)
        return result

    def get_all_children(self, item_id: Hashable) -> list[TreeRecord]:
        """Return every descendant of item_id, breadth-first.

        The direct children come first, then their children, and so on,
        each level in attach order. item_id itself is never included.

        Args:
            item_id: The id whose subtree is collected.

        Returns:
            List of descendant records, empty if item_id is unknown.
        """
        if item_id not in self._by_id:
            return []

        result: list[TreeRecord] = []
        seen = {item_id}
        queue = deque([item_id])

        while queue:
            current_id = queue.popleft()
            for child_id in self._children_of.get(current_id, ()):
                if child_id in seen:
                    continue
                child = self._by_id.get(child_id)
                if child is None:
                    continue
                seen.add(child_id)
                result.append(child)
                queue.append(child_id)

        return result

    def get_all_parents(self, item_id: Hashable) -> list[TreeRecord]:
        """Return the record with item_id followed by its ancestor chain.

        The walk goes up parent links and stops at a root, at the first
        parent id that is not in the index, or at an id already visited.

        Args:
            item_id: The id to start from.

        Returns:
            List starting with the record itself, nearest ancestor next.
            Empty if item_id is unknown.

        Example:
            >>> [r.id for r in index.get_all_parents(4)]
            [4, 2, 1]
        """
        result: list[TreeRecord] = []
        seen: set[Hashable] = set()
        current_id: Hashable | None = item_id

        while current_id is not None and current_id not in seen:
            record = self._by_id.get(current_id)
            if record is None:
                break
            result.append(record)
            seen.add(current_id)
            current_id = self._parent_of.get(current_id)

        return result

    def roots(self) -> list[TreeRecord]:
        """Return records with no parent or with a dangling parent, in order."""
        return [
            record for record in self._records
            if record.parent is None or record.parent not in self._by_id
        ]

    def depth(self, item_id: Hashable) -> int:
        """Return the number of known ancestors of item_id (-1 if unknown)."""
        return len(self.get_all_parents(item_id)) - 1

    # ==================== Mutations ====================

    def add_item(self, record: TreeRecord | Mapping[str, Any] | tuple) -> bool:
        """Add a record at the end of the collection.

        Args:
            record: TreeRecord, mapping or (id, parent[, attr]) tuple.

        Returns:
            True if the record was added, False if its id already exists
            (the index is left unchanged).

        Raises:
            DuplicateIdError: If the id exists and raise_on_error is True.
        """
        record = load_record(record)
        if record.id in self._by_id:
            return self._report(DuplicateIdError(record.id), False)

        self._index_record(record)
        logger.debug("Added item %r under parent %r", record.id, record.parent)
        return True

    def remove_item(self, item_id: Hashable) -> list[TreeRecord]:
        """Remove a record together with its whole subtree.

        The derived maps are rebuilt from the surviving records. Unknown
        ids are ignored silently, in both error modes.

        Args:
            item_id: The id of the subtree root to remove.

        Returns:
            The removed records in their former collection order.
        """
        if item_id not in self._by_id:
            return []

        doomed = {item_id}
        doomed.update(child.id for child in self.get_all_children(item_id))

        removed: list[TreeRecord] = []
        kept: list[TreeRecord] = []
        for record in self._records:
            (removed if record.id in doomed else kept).append(record)

        self._init_maps(kept)
        logger.debug("Removed item %r and %d descendants", item_id, len(removed) - 1)
        return removed

    def update_item(
        self,
        partial: TreeRecord | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> TreeRecord | None:
        """Merge fields onto an existing record, re-parenting it if needed.

        Fields absent from the update are preserved. The merged record
        replaces the old one at the same position. When 'parent' changes the
        record is unlinked from its old parent and appended to the children
        of the new one; its own subtree follows it. Neither the existence of
        the new parent nor the absence of cycles is checked.

        Args:
            partial: Mapping (or TreeRecord) of fields, including 'id'.
            **kwargs: Additional fields as keyword arguments.

        Returns:
            The new record, or None if the id is unknown (index unchanged).

        Raises:
            ValueError: If no 'id' is given.
            ItemNotFoundError: If the id is unknown and raise_on_error is True.

        Example:
            >>> index.update_item({'id': 2, 'label': 'Renamed'})
            >>> index.update_item(id=2, parent=None)  # make root
        """
        fields: dict[str, Any] = {}
        if isinstance(partial, TreeRecord):
            fields.update(partial.as_dict())
        elif partial is not None:
            fields.update(partial)
        fields.update(kwargs)

        if 'id' not in fields:
            raise ValueError("update_item requires an 'id' field")

        item_id = fields['id']
        existing = self._by_id.get(item_id)
        if existing is None:
            return self._report(ItemNotFoundError(item_id), None)

        new_record = existing.merged(fields)
        for i, record in enumerate(self._records):
            if record.id == item_id:
                self._records[i] = new_record
                break
        self._by_id[item_id] = new_record
        self._parent_of[item_id] = new_record.parent

        old_parent = existing.parent
        if old_parent != new_record.parent:
            self._unlink_child(old_parent, item_id)
            self._link_child(new_record.parent, item_id)
            logger.debug(
                "Moved item %r from parent %r to %r",
                item_id, old_parent, new_record.parent,
            )

        return new_record

    def clear(self) -> None:
        """Remove all records from this index."""
        self._init_maps([])

    # ==================== Walk ====================

    def walk(self) -> Iterator[tuple[int, TreeRecord]]:
        """Walk the hierarchy depth-first from the roots.

        Yields:
            Tuples of (depth, record), roots at depth 0, children in attach
            order. Records only reachable through a cycle are not yielded.

        Example:
            >>> for depth, record in index.walk():
            ...     print('  ' * depth + record.get_attr('label', ''))
        """
        seen: set[Hashable] = set()
        stack = [(0, record) for record in reversed(self.roots())]

        while stack:
            depth, record = stack.pop()
            if record.id in seen:
                continue
            seen.add(record.id)
            yield depth, record
            children = self.get_children(record.id)
            stack.extend((depth + 1, child) for child in reversed(children))

    # ==================== Conversion ====================

    def as_list(self) -> list[dict[str, Any]]:
        """Convert to a list of flat dicts in insertion order."""
        return [record.as_dict() for record in self._records]

    # ==================== Validation ====================

    @property
    def is_valid(self) -> bool:
        """True if the derived maps agree with the record collection."""
        return not self.validation_errors()

    def validation_errors(self) -> list[str]:
        """Check the derived maps against the record collection.

        Returns:
            List of human readable problems, empty when the index is
            consistent.
        """
        errors: list[str] = []

        if len(self._by_id) != len(self._records):
            errors.append(
                f"{len(self._records)} records but {len(self._by_id)} ids indexed"
            )
        for record in self._records:
            if self._by_id.get(record.id) is not record:
                errors.append(f"id {record.id!r} does not map to its record")
            if record.id not in self._parent_of:
                errors.append(f"id {record.id!r} missing from parent map")
            elif self._parent_of[record.id] != record.parent:
                errors.append(
                    f"parent map has {self._parent_of[record.id]!r} for "
                    f"{record.id!r}, record has {record.parent!r}"
                )
            if record.parent is not None:
                count = self._children_of.get(record.parent, []).count(record.id)
                if count != 1:
                    errors.append(
                        f"id {record.id!r} listed {count} times under {record.parent!r}"
                    )

        if set(self._parent_of) != set(self._by_id):
            errors.append("parent map keys differ from indexed ids")

        for parent_id, children in self._children_of.items():
            if not children:
                errors.append(f"empty children list for {parent_id!r}")
            for child_id in children:
                child = self._by_id.get(child_id)
                if child is None or child.parent != parent_id:
                    errors.append(f"stale child {child_id!r} under {parent_id!r}")

        return errors
