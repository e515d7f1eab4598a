"""
Shared fixtures.

empty_method is the tree of

    public void emptyMethod() { }

as a Java front-end hands it over: 18 nodes, structural nodes without
tokens, empty leaves carrying EMPTY.
"""

from typing import Optional

import pytest

from ast_corpus.tree import EMPTY_TOKEN, LabeledTree, SimpleNode

EMPTY_METHOD_CHILDREN = [1, 3, 4, 5, 7, 8, 9, 12, 13, 14]


def leaf(node_type: str, token: str = EMPTY_TOKEN, resolved: Optional[str] = None) -> SimpleNode:
    return SimpleNode(node_type, token, resolved)


def inner(node_type: str, *children: SimpleNode, resolved: Optional[str] = None) -> SimpleNode:
    return SimpleNode(node_type, None, resolved, list(children))


def build_empty_method(root_type: Optional[str] = None) -> SimpleNode:
    return inner(
        "METHOD",
        inner("MODIFIER_LIST", leaf("PUBLIC_KEYWORD", "public")),
        leaf("TYPE_PARAMETER_LIST"),
        leaf("WHITE_SPACE"),
        inner("TYPE", leaf("VOID_KEYWORD", "void")),
        leaf("WHITE_SPACE"),
        leaf("IDENTIFIER", "empty|method"),
        inner("PARAMETER_LIST", leaf("LPARENTH", "("), leaf("RPARENTH", ")")),
        leaf("THROWS_LIST"),
        leaf("WHITE_SPACE"),
        inner("CODE_BLOCK", leaf("LBRACE", "{"), leaf("WHITE_SPACE"), leaf("RBRACE", "}")),
        resolved=root_type,
    )


def build_star(n_leaves: int) -> SimpleNode:
    """Root with n_leaves leaf children."""
    return inner("ROOT", *[leaf("LEAF", f"t{i}") for i in range(n_leaves)])


@pytest.fixture
def empty_method() -> SimpleNode:
    return build_empty_method()


@pytest.fixture
def empty_method_tree() -> LabeledTree:
    return LabeledTree(build_empty_method(), "emptyMethod")


@pytest.fixture
def typed_empty_method_tree() -> LabeledTree:
    return LabeledTree(build_empty_method(root_type="type"), "emptyMethod")
