# ast_corpus/treesitter_ast.py
"""
Tree-sitter front-end: any language with a Tree-sitter grammar becomes a
SimpleNode tree.

Dependencies:
- pip install tree_sitter
- pip install tree_sitter_languages   (optional, bundles prebuilt grammars)

Without tree_sitter_languages, point TREE_SITTER_LIB at a compiled language
bundle (.so/.dylib) holding the grammars you need.

Usage:
- python -m ast_corpus.treesitter_ast --lang js test.js
"""

from __future__ import annotations

import os
import sys
from typing import List, Optional

try:
    from tree_sitter import Language, Parser
except Exception as e:  # pragma: no cover - helpful message if missing
    raise RuntimeError(
        "tree_sitter is required. Install with: pip install tree_sitter"
    ) from e

from ast_corpus.tokens import normalize_token
from ast_corpus.tree import EMPTY_TOKEN, SimpleNode, pre_order

_LANG_ALIASES = {
    "js": "javascript",
    "ts": "typescript",
    "c++": "cpp",
    "csharp": "c_sharp",
    "c#": "c_sharp",
    "objc": "objective_c",
    "py": "python",
    "golang": "go",
    "rs": "rust",
    "kt": "kotlin",
}


def _normalize_lang(name: str) -> str:
    name = name.strip().lower()
    return _LANG_ALIASES.get(name, name)


# =====================
# Language loading
# =====================
def load_language(lang_name: str) -> Language:
    """
    Load a Tree-sitter Language: first from tree_sitter_languages, then from
    the bundle in TREE_SITTER_LIB.
    """
    lang_name = _normalize_lang(lang_name)

    try:
        from tree_sitter_languages import get_language  # type: ignore
    except ImportError:
        get_language = None

    if get_language is not None:
        try:
            return get_language(lang_name)
        except Exception:
            pass  # not bundled there, try TREE_SITTER_LIB

    bundle_path = os.environ.get("TREE_SITTER_LIB")
    if not bundle_path:
        raise RuntimeError(
            f"Could not load language '{lang_name}'. Install 'tree_sitter_languages' "
            "or set TREE_SITTER_LIB to a compiled languages bundle."
        )

    try:
        return Language(bundle_path, lang_name)
    except Exception as e:
        raise RuntimeError(
            f"Failed to load language '{lang_name}' from bundle at {bundle_path}."
        ) from e


def get_parser(lang_name: str) -> Parser:
    language = load_language(lang_name)
    try:
        return Parser(language)
    except TypeError:
        # tree_sitter < 0.22 takes the language after construction
        parser = Parser()
        parser.set_language(language)
        return parser


# =====================
# Tree-sitter node -> Node
# =====================
def _node_text(node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def to_node(ts_node, source: bytes, named_only: bool = True, normalize: bool = True) -> SimpleNode:
    """
    Mirror a tree-sitter node. Leaves carry their source text as token,
    inner nodes carry no token. With named_only, anonymous nodes
    (punctuation, keywords) are left out.
    """
    def keep(child) -> bool:
        return child.is_named or not named_only

    def convert(node) -> SimpleNode:
        result = SimpleNode(node.type)
        children = [c for c in node.children if keep(c)]
        if not children:
            raw = _node_text(node, source).strip()
            if normalize:
                result.token = normalize_token(raw)
            else:
                result.token = raw or EMPTY_TOKEN
            return result
        for child in children:
            result.add_child(convert(child))
        return result

    return convert(ts_node)


def code_to_node(lang_name: str, code: str, named_only: bool = True, normalize: bool = True) -> SimpleNode:
    parser = get_parser(lang_name)
    source = code.encode("utf-8")
    tree = parser.parse(source)
    return to_node(tree.root_node, source, named_only, normalize)


# CLI =============

def _read_file(path: str) -> str:
    with open(path, "rb") as f:
        return f.read().decode("utf-8", errors="replace")


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    p = argparse.ArgumentParser(description="Dump a Tree-sitter tree as node types and tokens")
    p.add_argument("path", nargs="?", help="Source file path (reads stdin if omitted)")
    p.add_argument("--lang", required=True, help="Language name (e.g. javascript, python, cpp, rust, java)")
    p.add_argument("--raw-tokens", action="store_true", help="Keep leaf text as is instead of normalizing")
    args = p.parse_args(argv)

    code = _read_file(args.path) if args.path else sys.stdin.read()
    root = code_to_node(args.lang, code, normalize=not args.raw_tokens)

    for node in pre_order(root):
        if node.token is None:
            print(node.node_type)
        else:
            print(f"{node.node_type}\t{node.token}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
