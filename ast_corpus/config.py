# ast_corpus/config.py
import dataclasses
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ast_corpus.errors import ConfigurationError

# ============================
# Defaults
# ============================
DEFAULT_PATH_WIDTH = 2
DEFAULT_PATH_LENGTH = 9
DEFAULT_FILE_PREFIX = "data"

# camelCase names accepted in JSON configs
_KEY_ALIASES = {
    "outputDirectory": "output_directory",
    "pathWidth": "path_width",
    "pathLength": "path_length",
    "maxPathsInTrain": "max_paths_in_train",
    "maxPathsInTest": "max_paths_in_test",
    "nodesToNumbers": "nodes_to_numbers",
    "includeTokenTypes": "include_token_types",
    "filePrefix": "file_prefix",
    "randomSeed": "random_seed",
    "skipMalformed": "skip_malformed",
}


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Every knob of a corpus extraction run.

    path_width:          max distance between the two LCA children a path runs through
    path_length:         max number of nodes in a path, endpoints included
    max_paths_in_train:  keep at most this many paths per train tree (None = all)
    max_paths_in_test:   same for val/test trees
    nodes_to_numbers:    replace node types in paths with vocabulary ids
    include_token_types: emit resolved token types next to tokens
    random_seed:         seed for path sampling, None uses fresh randomness
    skip_malformed:      skip trees with token-less path endpoints instead of failing
    """
    output_directory: str
    path_width: int = DEFAULT_PATH_WIDTH
    path_length: int = DEFAULT_PATH_LENGTH
    max_paths_in_train: Optional[int] = None
    max_paths_in_test: Optional[int] = None
    nodes_to_numbers: bool = False
    include_token_types: bool = False
    file_prefix: str = DEFAULT_FILE_PREFIX
    random_seed: Optional[int] = None
    skip_malformed: bool = True

    def __post_init__(self):
        if not self.output_directory:
            raise ConfigurationError("output_directory must be set")
        if not self.file_prefix:
            raise ConfigurationError("file_prefix must be a non-empty string")
        _check_positive("path_width", self.path_width)
        _check_positive("path_length", self.path_length)
        _check_limit("max_paths_in_train", self.max_paths_in_train)
        _check_limit("max_paths_in_test", self.max_paths_in_test)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown configuration key: {key}")
            kwargs[name] = value
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_json(cls, path: str) -> "ExtractionConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must hold a JSON object")
        return cls.from_dict(data)

    def replace(self, **overrides) -> "ExtractionConfig":
        return dataclasses.replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _check_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


def _check_limit(name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"{name} must be None or a non-negative integer, got {value!r}")
