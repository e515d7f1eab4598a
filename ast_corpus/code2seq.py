# ast_corpus/code2seq.py
"""
code2seq path-context format (https://github.com/tech-srl/code2seq).

One sample per line:

    <label> <path> <path> ...

and every path is a comma separated record

    [startTokenType,]startToken,type1|type2|...|typeK,endToken[,endTokenType]

Tokens, types and labels are shielded so that they never contain a bare
separator: backslash, newline, carriage return, comma and space are escaped
with a backslash (node types also escape "|"). The mapping is injective, so
parse_path(render_path(p)).encode() gives back the rendered string.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ast_corpus.errors import MalformedTreeError
from ast_corpus.paths import ASTPath
from ast_corpus.tree import Node
from ast_corpus.vocab import NodeTypeVocabulary

# ============================
# Separators
# ============================
FIELD_SEPARATOR = ","
PATH_SEPARATOR = " "
NODE_SEPARATOR = "|"
ESCAPE = "\\"

NO_TYPE = "<NT>"

_TOKEN_ESCAPES = {
    ESCAPE: ESCAPE + ESCAPE,
    "\n": ESCAPE + "n",
    "\r": ESCAPE + "r",
    FIELD_SEPARATOR: ESCAPE + FIELD_SEPARATOR,
    PATH_SEPARATOR: ESCAPE + PATH_SEPARATOR,
}
_NODE_TYPE_ESCAPES = dict(_TOKEN_ESCAPES, **{NODE_SEPARATOR: ESCAPE + NODE_SEPARATOR})
_UNESCAPES = {"n": "\n", "r": "\r"}


# ============================
# Shielding
# ============================
def csv_shield(text: str) -> str:
    return "".join(_TOKEN_ESCAPES.get(c, c) for c in text)


def shield_node_type(text: str) -> str:
    return "".join(_NODE_TYPE_ESCAPES.get(c, c) for c in text)


def csv_unshield(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == ESCAPE:
            if i + 1 >= len(text):
                raise ValueError(f"Dangling escape at the end of {text!r}")
            nxt = text[i + 1]
            out.append(_UNESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(c)
        i += 1
    return "".join(out)


def split_unescaped(text: str, separator: str) -> List[str]:
    """Split on separator characters that are not preceded by an escape."""
    parts = []
    current = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == ESCAPE and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if c == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(c)
        i += 1
    parts.append("".join(current))
    return parts


# ============================
# Decoded records
# ============================
@dataclass
class PathContext:
    start_token: str
    node_types: List[str]
    end_token: str
    start_token_type: Optional[str] = None
    end_token_type: Optional[str] = None

    @property
    def has_types(self) -> bool:
        return self.start_token_type is not None

    def encode(self) -> str:
        fields = []
        if self.has_types:
            fields.append(csv_shield(self.start_token_type))
        fields.append(csv_shield(self.start_token))
        fields.append(NODE_SEPARATOR.join(shield_node_type(t) for t in self.node_types))
        fields.append(csv_shield(self.end_token))
        if self.has_types:
            fields.append(csv_shield(self.end_token_type))
        return FIELD_SEPARATOR.join(fields)


@dataclass
class Code2SeqSample:
    label: str
    path_contexts: List[PathContext] = field(default_factory=list)

    def encode(self) -> str:
        return render_sample(self.label, [p.encode() for p in self.path_contexts])


def parse_path(text: str) -> PathContext:
    fields = split_unescaped(text, FIELD_SEPARATOR)
    if len(fields) == 3:
        start, types, end = fields
        start_type = end_type = None
    elif len(fields) == 5:
        start_type, start, types, end, end_type = fields
        start_type = csv_unshield(start_type)
        end_type = csv_unshield(end_type)
    else:
        raise ValueError(f"Path must have 3 or 5 fields, got {len(fields)}: {text!r}")

    node_types = [csv_unshield(t) for t in split_unescaped(types, NODE_SEPARATOR)]
    return PathContext(
        start_token=csv_unshield(start),
        node_types=node_types,
        end_token=csv_unshield(end),
        start_token_type=start_type,
        end_token_type=end_type,
    )


def parse_sample(line: str) -> Code2SeqSample:
    line = line.rstrip("\n")
    parts = split_unescaped(line, PATH_SEPARATOR)
    label = csv_unshield(parts[0])
    return Code2SeqSample(label, [parse_path(p) for p in parts[1:] if p])


def render_sample(label: str, rendered_paths: Sequence[str]) -> str:
    if not rendered_paths:
        return csv_shield(label)
    return csv_shield(label) + PATH_SEPARATOR + PATH_SEPARATOR.join(rendered_paths)


# ============================
# Path -> string
# ============================
class Code2SeqFormatter:
    def __init__(
        self,
        include_token_types: bool = False,
        vocabulary: Optional[NodeTypeVocabulary] = None,
    ):
        self.include_token_types = include_token_types
        self.vocabulary = vocabulary

    def _node_to_string(self, node: Node) -> str:
        if self.vocabulary is not None:
            return str(self.vocabulary.record(node.node_type))
        return shield_node_type(node.node_type)

    def _token_type(self, node: Node) -> str:
        return csv_shield(node.resolved_token_type or NO_TYPE)

    def check_endpoints(self, path: ASTPath) -> None:
        if path.start.token is None:
            raise MalformedTreeError(f"Found null token in first node of path ({path.start.node_type})")
        if path.end.token is None:
            raise MalformedTreeError(f"Found null token in last node of path ({path.end.node_type})")

    def render_path(self, path: ASTPath) -> str:
        self.check_endpoints(path)
        nodes = path.nodes
        first, last = nodes[0], nodes[-1]

        fields = []
        if self.include_token_types:
            fields.append(self._token_type(first))
        fields.append(csv_shield(first.token))
        fields.append(NODE_SEPARATOR.join(self._node_to_string(n) for n in nodes))
        fields.append(csv_shield(last.token))
        if self.include_token_types:
            fields.append(self._token_type(last))
        return FIELD_SEPARATOR.join(fields)

    def render_sample(self, label: str, paths: Sequence[ASTPath]) -> str:
        # validate everything first so a bad tree leaves the vocabulary untouched
        for path in paths:
            self.check_endpoints(path)
        return render_sample(label, [self.render_path(p) for p in paths])
