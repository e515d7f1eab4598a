# ast_corpus/python_ast.py
"""
Python front-end: turns `ast` trees into SimpleNode trees.

- node type = AST class name, operators folded in ("BinOp:Add", "Compare:Lt:Gt")
- expression contexts (Load/Store/Del) are dropped
- identifiers and constants become tokens; a node whose only content is one
  identifier is itself the leaf ("Name" -> token "x"), otherwise identifiers
  hang below it as "Identifier" leaves
- childless structural nodes (Pass, empty arguments, ...) carry EMPTY
"""

import ast
from typing import Callable, Iterator, List, Optional, Union

from ast_corpus.tokens import normalize_token
from ast_corpus.tree import EMPTY_TOKEN, LabeledTree, SimpleNode

IDENTIFIER = "Identifier"
METHOD_NAME = "METHOD_NAME"

IDENTIFIER_FIELDS = {"id", "arg", "name", "names", "attr", "module", "asname"}
SKIPPED_FIELDS = {"ctx", "op", "ops", "type_comment", "kind"}
OPERATOR_TYPES = (ast.operator, ast.unaryop, ast.boolop, ast.cmpop)

TypeResolver = Callable[[ast.AST], Optional[str]]


# =====================
# Node types & literals
# =====================
def op_name(op) -> str:
    return op.__class__.__name__


def node_type_of(node: ast.AST) -> str:
    name = node.__class__.__name__
    if isinstance(node, (ast.BinOp, ast.UnaryOp, ast.BoolOp, ast.AugAssign)):
        return f"{name}:{op_name(node.op)}"
    if isinstance(node, ast.Compare):
        return name + "".join(f":{op_name(op)}" for op in node.ops)
    return name


def literal_text(value) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is Ellipsis:
        return "..."
    return repr(value)


def resolve_python_type(node: ast.AST) -> Optional[str]:
    """Best-effort static type: literal types and annotated arguments."""
    if isinstance(node, ast.Constant):
        return type(node.value).__name__
    if isinstance(node, ast.arg) and node.annotation is not None:
        return ast.unparse(node.annotation)
    return None


# =====================
# AST -> Node
# =====================
def _content(node: ast.AST) -> List[Union[ast.AST, str]]:
    parts: List[Union[ast.AST, str]] = []
    for field in node._fields:
        if field in SKIPPED_FIELDS:
            continue
        value = getattr(node, field, None)
        values = value if isinstance(value, list) else [value]
        for item in values:
            if isinstance(item, ast.AST):
                if not isinstance(item, (ast.expr_context,) + OPERATOR_TYPES):
                    parts.append(item)
            elif isinstance(item, str) and field in IDENTIFIER_FIELDS:
                parts.append(item)
    return parts


def to_node(
    tree: ast.AST,
    type_resolver: Optional[TypeResolver] = resolve_python_type,
    normalize: bool = True,
) -> SimpleNode:
    def text(raw: str) -> str:
        return normalize_token(raw) if normalize else raw

    def convert(node: ast.AST) -> SimpleNode:
        resolved = type_resolver(node) if type_resolver is not None else None
        result = SimpleNode(node_type_of(node), resolved_token_type=resolved)

        if isinstance(node, ast.Constant):
            result.token = text(literal_text(node.value))
            return result

        parts = _content(node)
        if not parts:
            result.token = EMPTY_TOKEN
        elif len(parts) == 1 and isinstance(parts[0], str):
            result.token = text(parts[0])
        else:
            for part in parts:
                if isinstance(part, str):
                    result.add_child(SimpleNode(IDENTIFIER, text(part), resolved))
                else:
                    result.add_child(convert(part))
        return result

    return convert(tree)


# =====================
# Function-level samples
# =====================
def code_to_ast(code: str) -> ast.AST:
    return ast.parse(code)


def extract_function_trees(
    tree: ast.AST,
    hide_name: bool = True,
    type_resolver: Optional[TypeResolver] = resolve_python_type,
    normalize: bool = True,
) -> Iterator[LabeledTree]:
    """
    Yield one LabeledTree per (async) function, labeled with the function
    name. With hide_name the name token of the root is replaced by
    METHOD_NAME so the label cannot leak into the paths.
    """
    for node in ast.walk(tree):
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        root = to_node(node, type_resolver, normalize)
        if hide_name and root.children and root.children[0].node_type == IDENTIFIER:
            root.children[0].token = METHOD_NAME
        yield LabeledTree(root, node.name)


def code_to_labeled_trees(code: str, hide_name: bool = True) -> List[LabeledTree]:
    return list(extract_function_trees(code_to_ast(code), hide_name=hide_name))
