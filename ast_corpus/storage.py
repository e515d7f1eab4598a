# ast_corpus/storage.py
"""
Dataset writers.

A storage owns one append-only file per split

    <output_directory>/<prefix>.<split>.<extension>

and writes exactly one line per stored tree. Trees without a split go to the
train file. All writes, statistics and the vocabulary sit behind one lock,
so worker threads may share a storage but lines are never interleaved.
"""

import logging
import os
import random
import threading
from abc import ABC, abstractmethod
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from ast_corpus.code2seq import Code2SeqFormatter
from ast_corpus.config import DEFAULT_FILE_PREFIX, ExtractionConfig
from ast_corpus.errors import ConfigurationError, MalformedTreeError
from ast_corpus.json_tree import JsonTreeFormatter
from ast_corpus.paths import PathMiner, PathRetrievalSettings, sample_paths
from ast_corpus.tree import Dataset, LabeledTree
from ast_corpus.vocab import NodeTypeVocabulary

logger = logging.getLogger(__name__)

VOCABULARY_FILE = "nodes_vocabulary.csv"


@dataclass
class HoldoutStatistic:
    n_samples: int = 0
    n_items: int = 0
    n_skipped: int = 0

    @property
    def rate(self) -> float:
        if self.n_samples == 0:
            return 0.0
        return self.n_items / self.n_samples

    def __str__(self) -> str:
        return (
            f"#samples: {self.n_samples}, #items: {self.n_items}, "
            f"#rate: {self.rate:.2f}, #skipped: {self.n_skipped}"
        )


class Storage(ABC):
    file_extension: str = ""
    item_name: str = "items"

    def __init__(self, output_directory: str, file_prefix: str = DEFAULT_FILE_PREFIX, skip_malformed: bool = True):
        self.output_directory = output_directory
        self.file_prefix = file_prefix
        self.skip_malformed = skip_malformed

        self._lock = threading.Lock()
        self._closed = False
        self._statistics: Dict[Dataset, HoldoutStatistic] = {d: HoldoutStatistic() for d in Dataset}
        self._writers: Dict[Dataset, TextIO] = {}

        os.makedirs(output_directory, exist_ok=True)
        try:
            for dataset in Dataset:
                self._writers[dataset] = open(self.file_path(dataset), "a", encoding="utf-8", newline="\n")
        except OSError:
            self._close_writers()
            raise

    # ----------------------------
    # format specific part
    # ----------------------------
    @abstractmethod
    def convert(self, labeled_tree: LabeledTree, holdout: Optional[Dataset]) -> Tuple[str, int]:
        """Return the sample line (without newline) and how many items it holds."""

    def finalize(self) -> None:
        """Hook for auxiliary files written once all samples are stored."""

    # ----------------------------
    # writing
    # ----------------------------
    def file_path(self, dataset: Dataset) -> str:
        name = f"{self.file_prefix}.{dataset.folder_name}.{self.file_extension}"
        return os.path.join(self.output_directory, name)

    def store(self, labeled_tree: LabeledTree, holdout: Optional[Dataset] = None) -> bool:
        """
        Append one sample for labeled_tree to the file of its split.

        Returns False when the tree was malformed and skipped.
        """
        dataset = holdout or Dataset.TRAIN
        with self._lock:
            if self._closed:
                raise ValueError("Storage is already closed")
            statistic = self._statistics[dataset]
            try:
                line, n_items = self.convert(labeled_tree, holdout)
            except MalformedTreeError as e:
                if not self.skip_malformed:
                    raise
                statistic.n_skipped += 1
                logger.warning("Skipping sample %r: %s", labeled_tree.label, e)
                return False

            self._writers[dataset].write(line + "\n")
            statistic.n_samples += 1
            statistic.n_items += n_items
            return True

    # ----------------------------
    # statistics
    # ----------------------------
    def statistic(self, dataset: Dataset) -> HoldoutStatistic:
        return self._statistics[dataset]

    def summary(self) -> Dict[str, Dict[str, float]]:
        return {
            dataset.folder_name: {
                "samples": stat.n_samples,
                self.item_name: stat.n_items,
                "rate": stat.rate,
                "skipped": stat.n_skipped,
            }
            for dataset, stat in self._statistics.items()
        }

    def print_statistic(self) -> None:
        for dataset, stat in self._statistics.items():
            logger.info("[%s] %s: %s", self.file_extension, dataset.folder_name, stat)

    # ----------------------------
    # lifecycle
    # ----------------------------
    def _close_writers(self) -> None:
        errors = []
        for writer in self._writers.values():
            try:
                writer.close()
            except OSError as e:
                errors.append(e)
        self._writers = {}
        if errors:
            raise errors[0]

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._close_writers()
            finally:
                self.finalize()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class Code2SeqStorage(Storage):
    """
    Path-based representation of each tree (code2seq format).

    path_width / path_length bound the mined paths, max_paths_in_train /
    max_paths_in_test cap the paths kept per tree, nodes_to_numbers replaces
    node types with vocabulary ids dumped to nodes_vocabulary.csv on close.
    """

    file_extension = "c2s"
    item_name = "paths"

    def __init__(
        self,
        output_directory: str,
        path_width: int,
        path_length: int,
        max_paths_in_train: Optional[int] = None,
        max_paths_in_test: Optional[int] = None,
        nodes_to_numbers: bool = False,
        include_token_types: bool = False,
        file_prefix: str = DEFAULT_FILE_PREFIX,
        random_seed: Optional[int] = None,
        skip_malformed: bool = True,
    ):
        # validate before touching the filesystem
        settings = PathRetrievalSettings(max_length=path_length, max_width=path_width)
        for name, limit in (("max_paths_in_train", max_paths_in_train), ("max_paths_in_test", max_paths_in_test)):
            if limit is not None and limit < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {limit}")
        vocabulary = _load_vocabulary(os.path.join(output_directory, VOCABULARY_FILE)) if nodes_to_numbers else None

        super().__init__(output_directory, file_prefix, skip_malformed)
        self.miner = PathMiner(settings)
        self.max_paths_in_train = max_paths_in_train
        self.max_paths_in_test = max_paths_in_test
        self.nodes_to_numbers = nodes_to_numbers
        self.vocabulary = vocabulary
        self.formatter = Code2SeqFormatter(include_token_types, self.vocabulary)
        self.rng = random.Random(random_seed)

    @property
    def vocabulary_path(self) -> str:
        return os.path.join(self.output_directory, VOCABULARY_FILE)

    def max_paths(self, holdout: Optional[Dataset]) -> Optional[int]:
        if holdout is None or holdout == Dataset.TRAIN:
            return self.max_paths_in_train
        return self.max_paths_in_test

    def convert(self, labeled_tree: LabeledTree, holdout: Optional[Dataset]) -> Tuple[str, int]:
        paths = self.miner.retrieve_paths(labeled_tree.root)
        paths = sample_paths(paths, self.max_paths(holdout), self.rng)
        return self.formatter.render_sample(labeled_tree.label, paths), len(paths)

    def finalize(self) -> None:
        if self.vocabulary is None:
            return
        try:
            self.vocabulary.dump_csv(self.vocabulary_path)
        except OSError:
            logger.exception("Could not write node vocabulary to %s", self.vocabulary_path)
            raise
        logger.info("Wrote %d node types to %s", len(self.vocabulary), self.vocabulary_path)


def _load_vocabulary(path: str) -> NodeTypeVocabulary:
    # split files are appended to, so ids from an earlier run must stay valid
    if not os.path.exists(path):
        return NodeTypeVocabulary()
    vocabulary = NodeTypeVocabulary.from_csv(path)
    logger.info("Continuing %d node types from %s", len(vocabulary), path)
    return vocabulary


class JsonTreeStorage(Storage):
    """Whole trees, one JSON object per line (Python150K layout)."""

    file_extension = "jsonl"
    item_name = "nodes"

    def __init__(
        self,
        output_directory: str,
        include_token_types: bool = False,
        file_prefix: str = DEFAULT_FILE_PREFIX,
        skip_malformed: bool = True,
    ):
        super().__init__(output_directory, file_prefix, skip_malformed)
        self.formatter = JsonTreeFormatter(include_token_types)

    def convert(self, labeled_tree: LabeledTree, holdout: Optional[Dataset]) -> Tuple[str, int]:
        representation = self.formatter.collect_tree_representation(labeled_tree, holdout)
        return self.formatter.format_representation(representation), len(representation.tree)


# ============================
# Factory
# ============================
FORMATS = {
    "code2seq": Code2SeqStorage,
    "jsontree": JsonTreeStorage,
}


def open_storage(config: ExtractionConfig, fmt: str) -> Storage:
    if fmt == "code2seq":
        return Code2SeqStorage(
            config.output_directory,
            path_width=config.path_width,
            path_length=config.path_length,
            max_paths_in_train=config.max_paths_in_train,
            max_paths_in_test=config.max_paths_in_test,
            nodes_to_numbers=config.nodes_to_numbers,
            include_token_types=config.include_token_types,
            file_prefix=config.file_prefix,
            random_seed=config.random_seed,
            skip_malformed=config.skip_malformed,
        )
    if fmt == "jsontree":
        return JsonTreeStorage(
            config.output_directory,
            include_token_types=config.include_token_types,
            file_prefix=config.file_prefix,
            skip_malformed=config.skip_malformed,
        )
    raise ConfigurationError(f"Unknown storage format {fmt!r}, expected one of {sorted(FORMATS)}")


def open_storages(config: ExtractionConfig, formats: Sequence[str]) -> List[Storage]:
    if not formats:
        raise ConfigurationError("At least one storage format is required")
    storages: List[Storage] = []
    with ExitStack() as stack:
        for fmt in formats:
            storage = open_storage(config, fmt)
            stack.callback(storage.close)
            storages.append(storage)
        # every storage opened, keep them open for the caller
        stack.pop_all()
    return storages


def close_storages(storages: Sequence[Storage]) -> None:
    """
    Close every storage even when some close fails; a failure is re-raised
    only once all of them have been released.
    """
    with ExitStack() as stack:
        for storage in reversed(storages):
            stack.callback(storage.close)
