# ast_corpus/cli.py
import argparse
import logging
import sys
from typing import List, Optional

from ast_corpus.config import DEFAULT_FILE_PREFIX, DEFAULT_PATH_LENGTH, DEFAULT_PATH_WIDTH, ExtractionConfig
from ast_corpus.errors import ConfigurationError
from ast_corpus.pipeline import extract_corpus, iter_labeled_trees, iter_python_files
from ast_corpus.storage import FORMATS, close_storages, open_storages
from ast_corpus.tree import Dataset

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(message)s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ast-corpus",
        description="Extract code2seq path contexts and JSON trees from Python functions",
    )
    p.add_argument("sources", nargs="+", help="Python files or directories")
    p.add_argument("--output", "-o", help="Output directory")
    p.add_argument("--config", help="JSON file with extraction settings (CLI flags win)")
    p.add_argument(
        "--format", dest="formats", action="append", choices=sorted(FORMATS),
        help="Output format, may be repeated (default: code2seq)",
    )
    p.add_argument("--holdout", default="train", help="Split of every sample: train, val, test or none")
    p.add_argument("--path-length", type=int, default=None, help=f"Max nodes per path (default {DEFAULT_PATH_LENGTH})")
    p.add_argument("--path-width", type=int, default=None, help=f"Max path width (default {DEFAULT_PATH_WIDTH})")
    p.add_argument("--max-paths-train", type=int, default=None)
    p.add_argument("--max-paths-test", type=int, default=None)
    p.add_argument("--nodes-to-numbers", action="store_true", default=None)
    p.add_argument("--token-types", action="store_true", default=None)
    p.add_argument("--prefix", default=None, help=f"Output file prefix (default {DEFAULT_FILE_PREFIX})")
    p.add_argument("--seed", type=int, default=None, help="Seed for path sampling")
    p.add_argument("--strict", action="store_true", help="Abort on malformed trees instead of skipping them")
    p.add_argument("--keep-names", action="store_true", help="Do not hide function names in their trees")
    p.add_argument("--no-progress", action="store_true")
    p.add_argument("--log-level", default="INFO")
    return p


def config_from_args(args: argparse.Namespace) -> ExtractionConfig:
    overrides = {
        "output_directory": args.output,
        "path_length": args.path_length,
        "path_width": args.path_width,
        "max_paths_in_train": args.max_paths_train,
        "max_paths_in_test": args.max_paths_test,
        "nodes_to_numbers": args.nodes_to_numbers,
        "include_token_types": args.token_types,
        "file_prefix": args.prefix,
        "random_seed": args.seed,
    }
    if args.strict:
        overrides["skip_malformed"] = False
    overrides = {k: v for k, v in overrides.items() if v is not None}

    if args.config:
        return ExtractionConfig.from_json(args.config).replace(**overrides)
    if "output_directory" not in overrides:
        raise ConfigurationError("--output is required when no --config is given")
    return ExtractionConfig(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    try:
        config = config_from_args(args)
        holdout = Dataset.from_name(args.holdout)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 2

    formats = args.formats or ["code2seq"]
    files = iter_python_files(args.sources)
    samples = iter_labeled_trees(files, holdout, hide_name=not args.keep_names)

    try:
        storages = open_storages(config, formats)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    try:
        n_trees = extract_corpus(samples, storages, progress=not args.no_progress)
    finally:
        close_storages(storages)

    for storage in storages:
        storage.print_statistic()
    print(f"[OK] Processed {n_trees} functions into {config.output_directory}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
