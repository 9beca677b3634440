# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex package - Hierarchical index over flat records.

This package provides the TreeIndex class, a flat record collection with
derived parent and children maps for fast ancestry and subtree queries.

The package is organized into:
- core: Main TreeIndex class with queries, mutations, walk and validation
- loading: Functions converting source data into TreeRecord instances

Example:
    >>> from genro_treeindex import TreeIndex
    >>> index = TreeIndex([{'id': 1, 'parent': None}, {'id': 2, 'parent': 1}])
    >>> [r.id for r in index.get_children(1)]
    [2]
"""

from .core import TreeIndex
from .loading import load_from_list, load_record

__all__ = ["TreeIndex", "load_from_list", "load_record"]
