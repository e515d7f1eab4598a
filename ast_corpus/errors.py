# ast_corpus/errors.py


class CorpusError(Exception):
    """Base class for everything the corpus builder raises on purpose."""


class MalformedTreeError(CorpusError, ValueError):
    """A tree handed over by a front-end breaks the node contract."""


class ConfigurationError(CorpusError, ValueError):
    """Extraction settings rejected before any tree is processed."""
