# ast_corpus/json_tree.py
"""
Trees as JSON Lines in the Python150K layout
(https://www.sri.inf.ethz.ch/py150, https://jsonlines.org).

    {"label": "...", "holdout": "train", "tree": [
        {"token": null, "nodeType": "FunctionDef", "children": [1, 2]},
        ...
    ]}

Nodes are numbered in pre-order starting at 0, so every child index is
larger than the index of its parent. "tokenType" is only written when token
types were requested and "holdout" only when the split is known.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ast_corpus.tree import Dataset, LabeledTree, Node, pre_order

NO_TYPE = "<NT>"


@dataclass
class NodeRepresentation:
    token: Optional[str]
    node_type: str
    children: List[int] = field(default_factory=list)
    token_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"token": self.token, "nodeType": self.node_type}
        if self.token_type is not None:
            out["tokenType"] = self.token_type
        out["children"] = list(self.children)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeRepresentation":
        return cls(
            token=data.get("token"),
            node_type=data["nodeType"],
            children=list(data.get("children", [])),
            token_type=data.get("tokenType"),
        )


@dataclass
class TreeRepresentation:
    label: str
    tree: List[NodeRepresentation]
    holdout: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"label": self.label}
        if self.holdout is not None:
            out["holdout"] = self.holdout
        out["tree"] = [n.to_dict() for n in self.tree]
        return out


class JsonTreeFormatter:
    def __init__(self, include_token_types: bool = False):
        self.include_token_types = include_token_types

    def collect_node_representation(self, root: Node) -> List[NodeRepresentation]:
        # pass 1: pre-order ids, pass 2: representations
        order = list(pre_order(root))
        node_to_id = {id(node): i for i, node in enumerate(order)}

        representations = []
        for node in order:
            children_ids = [node_to_id[id(c)] for c in node.children if id(c) in node_to_id]
            token_type = None
            if self.include_token_types:
                token_type = node.resolved_token_type or NO_TYPE
            representations.append(
                NodeRepresentation(node.token, node.node_type, children_ids, token_type)
            )
        return representations

    def collect_tree_representation(
        self,
        labeled_tree: LabeledTree,
        holdout: Optional[Dataset] = None,
    ) -> TreeRepresentation:
        return TreeRepresentation(
            label=labeled_tree.label,
            tree=self.collect_node_representation(labeled_tree.root),
            holdout=holdout.folder_name if holdout is not None else None,
        )

    def format_representation(self, representation: TreeRepresentation) -> str:
        return json.dumps(representation.to_dict(), ensure_ascii=False)

    def format(self, labeled_tree: LabeledTree, holdout: Optional[Dataset] = None) -> str:
        return self.format_representation(self.collect_tree_representation(labeled_tree, holdout))


def parse_tree_line(line: str) -> TreeRepresentation:
    obj = json.loads(line)
    return TreeRepresentation(
        label=obj["label"],
        tree=[NodeRepresentation.from_dict(n) for n in obj["tree"]],
        holdout=obj.get("holdout"),
    )
