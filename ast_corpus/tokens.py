# ast_corpus/tokens.py
import re
from typing import List

from ast_corpus.tree import EMPTY_TOKEN

SUBTOKEN_SEPARATOR = "|"

# camelCase / PascalCase / ACRONYMWord boundaries
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
# everything that is neither a letter nor a digit splits subtokens
_NON_ALNUM = re.compile(r"[^0-9A-Za-z]+")
_DIGIT_BOUNDARY = re.compile(r"(?<=[A-Za-z])(?=[0-9])|(?<=[0-9])(?=[A-Za-z])")


def split_to_subtokens(token: str) -> List[str]:
    """
    "emptyMethod" -> ["empty", "method"]
    "HTTPServer_v2" -> ["http", "server", "v", "2"]
    """
    subtokens = []
    for chunk in _NON_ALNUM.split(token):
        if not chunk:
            continue
        for part in _CAMEL_BOUNDARY.split(chunk):
            for piece in _DIGIT_BOUNDARY.split(part):
                if piece:
                    subtokens.append(piece.lower())
    return subtokens


def normalize_token(token: str, default: str = EMPTY_TOKEN) -> str:
    subtokens = split_to_subtokens(token)
    if not subtokens:
        return default
    return SUBTOKEN_SEPARATOR.join(subtokens)
