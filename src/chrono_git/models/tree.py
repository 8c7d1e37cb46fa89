"""File tree model shared by commits, the working directory and the index."""

from typing import Dict

from .base import CamelModel


class FileEntry(CamelModel):
    """A single file in a tree."""

    content: str
    modified: bool = False


Tree = Dict[str, FileEntry]


def copy_tree(tree: Tree) -> Tree:
    """Return an independent copy of a tree."""
    return {path: entry.model_copy() for path, entry in tree.items()}
