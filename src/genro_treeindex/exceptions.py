# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex exceptions.

These are raised only when the index is built with ``raise_on_error=True``.
In the default mode the same conditions are reported through return values.
"""

from __future__ import annotations

from typing import Hashable


class TreeIndexError(Exception):
    """Base exception for TreeIndex errors."""

    pass


class DuplicateIdError(TreeIndexError):
    """Raised when a record is added with an id already in the index."""

    def __init__(self, item_id: Hashable) -> None:
        self.item_id = item_id
        super().__init__(f"Item with id {item_id!r} already exists")


class ItemNotFoundError(TreeIndexError, KeyError):
    """Raised when an update references an id not in the index."""

    def __init__(self, item_id: Hashable) -> None:
        self.item_id = item_id
        super().__init__(f"Item with id {item_id!r} not found")

    def __str__(self) -> str:
        return str(self.args[0])
