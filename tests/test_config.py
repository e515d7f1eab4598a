import json

import pytest

from ast_corpus.config import ExtractionConfig
from ast_corpus.errors import ConfigurationError


def test_defaults():
    config = ExtractionConfig("out")
    assert config.path_width == 2
    assert config.path_length == 9
    assert config.file_prefix == "data"
    assert config.max_paths_in_train is None
    assert config.skip_malformed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"output_directory": ""},
        {"output_directory": "out", "path_width": 0},
        {"output_directory": "out", "path_length": -1},
        {"output_directory": "out", "path_length": True},
        {"output_directory": "out", "max_paths_in_train": -5},
        {"output_directory": "out", "max_paths_in_test": 1.5},
        {"output_directory": "out", "file_prefix": ""},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        ExtractionConfig(**kwargs)


def test_from_dict_accepts_camel_case():
    config = ExtractionConfig.from_dict({
        "outputDirectory": "out",
        "pathWidth": 3,
        "max_paths_in_train": 100,
        "nodesToNumbers": True,
    })
    assert config.path_width == 3
    assert config.max_paths_in_train == 100
    assert config.nodes_to_numbers


def test_from_dict_rejects_unknown_and_missing_keys():
    with pytest.raises(ConfigurationError, match="Unknown configuration key"):
        ExtractionConfig.from_dict({"outputDirectory": "out", "pathDepth": 3})
    with pytest.raises(ConfigurationError):
        ExtractionConfig.from_dict({"pathWidth": 3})


def test_from_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"outputDirectory": "out", "randomSeed": 7}), encoding="utf-8")
    config = ExtractionConfig.from_json(str(path))
    assert config.random_seed == 7

    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ExtractionConfig.from_json(str(path))


def test_replace_revalidates():
    config = ExtractionConfig("out")
    assert config.replace(path_length=5).path_length == 5
    assert config.to_dict()["output_directory"] == "out"
    with pytest.raises(ConfigurationError):
        config.replace(path_width=0)
