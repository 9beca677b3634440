# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeIndex - Hierarchical index over flat parent/child records.

A lightweight, zero-dependency library that keeps a flat list of records
indexed by id, parent and children, for the Genro ecosystem (Genro Kyō).
"""

__version__ = "0.1.0"

from .exceptions import (
    DuplicateIdError,
    ItemNotFoundError,
    TreeIndexError,
)
from .index import TreeIndex
from .record import TreeRecord

__all__ = [
    # Core classes
    "TreeIndex",
    "TreeRecord",
    # Exceptions
    "TreeIndexError",
    "DuplicateIdError",
    "ItemNotFoundError",
]
