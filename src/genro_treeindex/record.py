# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex record class."""

from __future__ import annotations

from typing import Any, Hashable, Mapping


class TreeRecord:
    """A record in a TreeIndex.

    Each record has:
    - id: Opaque hashable identifier, unique within an index
    - parent: The parent's id, or None for a root record
    - attr: Dictionary of payload fields (e.g. 'label'), opaque to the index

    Records stored in an index are replaced, not mutated, on update:
    use merged() to build the replacement.

    Example:
        >>> record = TreeRecord(2, 1, label='Child')
        >>> record.parent
        1
        >>> record['label']
        'Child'
    """

    __slots__ = ('id', 'parent', 'attr')

    def __init__(
        self,
        id: Hashable,
        parent: Hashable | None = None,
        attr: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize a TreeRecord.

        Args:
            id: The record's identifier.
            parent: The parent's identifier, or None for a root.
            attr: Optional dictionary of payload fields.
            **kwargs: Additional payload fields as keyword arguments.

        Raises:
            ValueError: If id is None or the payload has an 'id' or
                'parent' field.
        """
        if id is None:
            raise ValueError("record id cannot be None")
        payload = dict(attr) if attr else {}
        payload.update(kwargs)
        reserved = sorted({'id', 'parent'} & payload.keys())
        if reserved:
            raise ValueError(f"payload cannot contain reserved fields {reserved!r}")
        self.id = id
        self.parent = parent
        self.attr = payload

    def __repr__(self) -> str:
        return f"TreeRecord({self.id!r}, parent={self.parent!r}, attr={self.attr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeRecord):
            return NotImplemented
        return (
            self.id == other.id
            and self.parent == other.parent
            and self.attr == other.attr
        )

    def __getitem__(self, name: str) -> Any:
        if name == 'id':
            return self.id
        if name == 'parent':
            return self.parent
        return self.attr[name]

    def __contains__(self, name: str) -> bool:
        return name in ('id', 'parent') or name in self.attr

    @property
    def is_root(self) -> bool:
        """True if this record declares no parent."""
        return self.parent is None

    def get_attr(self, attr: str | None = None, default: Any = None) -> Any:
        """Get payload field value or all payload fields.

        Args:
            attr: Field name. If None, returns all payload fields.
            default: Default value if field not found.

        Returns:
            Field value, default, or dict of all payload fields.
        """
        if attr is None:
            return self.attr
        return self.attr.get(attr, default)

    def merged(self, partial: Mapping[str, Any]) -> TreeRecord:
        """Return a new record with the fields of partial written over this one.

        Fields absent from partial are preserved. The id never changes;
        a 'parent' key set to None turns the record into a root.

        Args:
            partial: Mapping of fields to overwrite.

        Returns:
            The merged TreeRecord. This record is left untouched.
        """
        fields = dict(partial)
        fields.pop('id', None)
        parent = fields.pop('parent', self.parent)
        return TreeRecord(self.id, parent, {**self.attr, **fields})

    def as_dict(self) -> dict[str, Any]:
        """Convert to a flat dict with 'id', 'parent' and the payload fields."""
        return {'id': self.id, 'parent': self.parent, **self.attr}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TreeRecord:
        """Build a record from a flat mapping.

        Args:
            data: Mapping with 'id', optional 'parent' and payload fields.

        Returns:
            A new TreeRecord.

        Raises:
            ValueError: If data has no 'id' key or its id is None.
        """
        if 'id' not in data:
            raise ValueError(f"record mapping must include 'id': {dict(data)!r}")
        fields = dict(data)
        item_id = fields.pop('id')
        parent = fields.pop('parent', None)
        return cls(item_id, parent, fields)
