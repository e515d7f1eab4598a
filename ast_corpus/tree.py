# ast_corpus/tree.py
"""
Minimal tree model shared by every front-end and formatter.

A front-end (Python ast, tree-sitter, ...) turns its own nodes into objects
exposing four attributes:

    node_type            grammar-level type, never empty
    token                leaf text, None for structural nodes
    resolved_token_type  resolved type of the token, None when unknown
    children             ordered child nodes

Anything with these attributes is a Node; SimpleNode is the stock one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Protocol, Sequence

from ast_corpus.errors import MalformedTreeError

EMPTY_TOKEN = "EMPTY"


# ============================
# Node capability set
# ============================
class Node(Protocol):
    node_type: str
    token: Optional[str]
    resolved_token_type: Optional[str]

    @property
    def children(self) -> Sequence["Node"]: ...


@dataclass(eq=False)
class SimpleNode:
    node_type: str
    token: Optional[str] = None
    resolved_token_type: Optional[str] = None
    children: List["SimpleNode"] = field(default_factory=list)

    def __post_init__(self):
        if not self.node_type:
            raise MalformedTreeError("Node type must be a non-empty string")

    def add_child(self, child: "SimpleNode") -> "SimpleNode":
        self.children.append(child)
        return child

    def __repr__(self) -> str:
        return f"SimpleNode({self.node_type!r}, token={self.token!r}, children={len(self.children)})"


@dataclass(frozen=True)
class LabeledTree:
    root: Node
    label: str

    def __post_init__(self):
        if not self.label:
            raise MalformedTreeError("Labeled tree must carry a non-empty label")


# ============================
# Dataset splits
# ============================
class Dataset(Enum):
    TRAIN = "train"
    VAL = "val"
    TEST = "test"

    @property
    def folder_name(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["Dataset"]:
        """
        Map a split name onto a Dataset. None, "" and "none" mean "no split",
        which storages treat like train.
        """
        if name is None:
            return None
        key = name.strip().lower()
        if key in ("", "none"):
            return None
        alias = _SPLIT_ALIASES.get(key)
        if alias is None:
            raise ValueError(f"Unknown dataset split: {name!r}")
        return alias


_SPLIT_ALIASES = {
    "train": Dataset.TRAIN,
    "training": Dataset.TRAIN,
    "val": Dataset.VAL,
    "valid": Dataset.VAL,
    "validation": Dataset.VAL,
    "dev": Dataset.VAL,
    "test": Dataset.TEST,
}


# ============================
# Traversals
# ============================
def is_leaf(node: Node) -> bool:
    return len(node.children) == 0


def pre_order(root: Node) -> Iterator[Node]:
    """Yield each node once, parent before children, children left to right."""
    seen = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(node.children))


def post_order(root: Node) -> Iterator[Node]:
    """Yield each node once, children left to right before their parent."""
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))


def count_nodes(root: Node) -> int:
    return sum(1 for _ in pre_order(root))
