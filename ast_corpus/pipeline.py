# ast_corpus/pipeline.py
import logging
import os
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from tqdm import tqdm

from ast_corpus.python_ast import code_to_ast, extract_function_trees
from ast_corpus.storage import Storage
from ast_corpus.tree import Dataset, LabeledTree

logger = logging.getLogger(__name__)

Sample = Tuple[LabeledTree, Optional[Dataset]]

SKIPPED_DIRS = {"__pycache__", ".git", ".hg", ".svn", ".tox", ".venv", "venv", "node_modules"}


def extract_corpus(
    samples: Iterable[Sample],
    storages: Sequence[Storage],
    progress: bool = True,
) -> int:
    """
    Store every (tree, split) pair into each storage, one tree at a time.
    Returns the number of trees consumed.
    """
    n_trees = 0
    for labeled_tree, holdout in tqdm(samples, disable=not progress, unit="tree"):
        for storage in storages:
            storage.store(labeled_tree, holdout)
        n_trees += 1
    return n_trees


# ======================================================
# Local Python sources
# ======================================================
def iter_python_files(paths: Iterable[str]) -> Iterator[str]:
    for path in paths:
        if os.path.isfile(path):
            yield path
            continue
        if not os.path.isdir(path):
            logger.warning("Skipping %s: not a file or directory", path)
            continue
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
            for name in sorted(filenames):
                if name.endswith(".py"):
                    yield os.path.join(dirpath, name)


def iter_labeled_trees(
    files: Iterable[str],
    holdout: Optional[Dataset] = None,
    hide_name: bool = True,
) -> Iterator[Sample]:
    """Parse each file and yield its functions; unreadable files are skipped."""
    for path in files:
        try:
            with open(path, "r", encoding="utf-8") as f:
                code = f.read()
            tree = code_to_ast(code)
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as e:
            logger.warning("Skipping %s: %s", path, e)
            continue

        try:
            trees: List[LabeledTree] = list(extract_function_trees(tree, hide_name=hide_name))
        except RecursionError:
            logger.warning("Skipping %s: tree too deep", path)
            continue

        for labeled_tree in trees:
            yield labeled_tree, holdout
