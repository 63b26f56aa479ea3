"""
Family tree viewer.

Loads family members from a Supabase table (or a CSV export), builds a single
rooted tree with spouse links, and keeps the expand / collapse state the
Streamlit app draws from:

- member records and their sources (records)
- tree construction (tree_builder)
- expand / collapse state (visibility)
- Graphviz rendering (diagram)
"""

from .records import MemberRecord, RecordSourceError
from .tree_builder import CyclicStructureError, TreeNode, build
from .visibility import VisibilityController, initialize, toggle

__all__ = [
    "CyclicStructureError",
    "MemberRecord",
    "RecordSourceError",
    "TreeNode",
    "VisibilityController",
    "build",
    "initialize",
    "toggle",
]
