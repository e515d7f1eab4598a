# ast_corpus/paths.py
"""
AST path mining.

A path connects two leaves through their lowest common ancestor (LCA):

    upward_nodes    start leaf ... child of the LCA   (bottom-up)
    top_node        the LCA
    downward_nodes  child of the LCA ... end leaf     (top-down)

Paths are collected in one post-order pass. Every node keeps the upward
chains ("pieces") that start at a leaf of its subtree and end at the node
itself. At an inner node the pieces of child i are joined with the pieces of
child j (i < j <= i + max_width) through the node. Pieces too long to ever
fit in a path are dropped as soon as they are built, so the work grows with
the number of short paths rather than with the number of leaf pairs.
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ast_corpus.errors import ConfigurationError
from ast_corpus.tree import Node, is_leaf, post_order


@dataclass(frozen=True)
class PathRetrievalSettings:
    max_length: int
    max_width: int

    def __post_init__(self):
        if self.max_length <= 0:
            raise ConfigurationError(f"max_length must be positive, got {self.max_length}")
        if self.max_width <= 0:
            raise ConfigurationError(f"max_width must be positive, got {self.max_width}")


@dataclass(frozen=True)
class ASTPath:
    upward_nodes: Sequence[Node]
    top_node: Node
    downward_nodes: Sequence[Node]

    @property
    def nodes(self) -> List[Node]:
        return list(self.upward_nodes) + [self.top_node] + list(self.downward_nodes)

    @property
    def start(self) -> Node:
        return self.upward_nodes[0]

    @property
    def end(self) -> Node:
        return self.downward_nodes[-1]

    def __len__(self) -> int:
        return len(self.upward_nodes) + 1 + len(self.downward_nodes)

    @property
    def width(self) -> int:
        """Distance between the LCA children the path enters and leaves through."""
        left = _child_index(self.top_node, self.upward_nodes[-1])
        right = _child_index(self.top_node, self.downward_nodes[0])
        return abs(right - left)


def _child_index(parent: Node, child: Node) -> int:
    for i, candidate in enumerate(parent.children):
        if candidate is child:
            return i
    raise ValueError("Node is not a direct child of the path top node")


class PathMiner:
    def __init__(self, settings: PathRetrievalSettings):
        self.settings = settings

    def retrieve_paths(self, root: Node) -> List[ASTPath]:
        max_length = self.settings.max_length
        max_width = self.settings.max_width

        # a piece ending at a node needs at least the LCA and one more node
        max_piece_length = max_length - 2

        pieces: Dict[int, List[List[Node]]] = {}
        paths: List[ASTPath] = []

        for node in post_order(root):
            if is_leaf(node):
                pieces[id(node)] = [[node]]
                continue

            per_child = [pieces.pop(id(child), []) for child in node.children]

            for left_index, left_pieces in enumerate(per_child):
                if not left_pieces:
                    continue
                last_right = min(left_index + max_width, len(per_child) - 1)
                for right_index in range(left_index + 1, last_right + 1):
                    right_pieces = per_child[right_index]
                    for up in left_pieces:
                        for down in right_pieces:
                            if len(up) + 1 + len(down) <= max_length:
                                paths.append(ASTPath(tuple(up), node, tuple(reversed(down))))

            extended = []
            for child_pieces in per_child:
                for piece in child_pieces:
                    if len(piece) + 1 <= max_piece_length:
                        extended.append(piece + [node])
            pieces[id(node)] = extended

        return paths


def sample_paths(
    paths: List[ASTPath],
    limit: Optional[int],
    rng: Optional[random.Random] = None,
) -> List[ASTPath]:
    """
    Keep at most `limit` paths. With no limit the miner order is kept;
    otherwise a shuffled copy is truncated.
    """
    if limit is None:
        return list(paths)
    shuffled = list(paths)
    (rng or random).shuffle(shuffled)
    return shuffled[:limit]
