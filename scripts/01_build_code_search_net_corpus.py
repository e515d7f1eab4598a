import os
import sys
import logging
from tqdm import tqdm
from datasets import load_dataset

# ======================================================
# Project setup
# ======================================================
PROJECT_ROOT = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..")
)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from ast_corpus.config import ExtractionConfig
from ast_corpus.python_ast import code_to_ast, extract_function_trees
from ast_corpus.storage import close_storages, open_storages
from ast_corpus.tree import Dataset

# ======================================================
# Config
# ======================================================
OUTPUT_DIR = os.path.join(PROJECT_ROOT, "data", "code_search_net")

DATASET_NAME = "code_search_net"
LANGUAGE = "python"
SPLITS = ["train", "validation", "test"]

MAX_SAMPLES_PER_SPLIT = 20_000
FORMATS = ["code2seq", "jsontree"]

CONFIG = ExtractionConfig(
    output_directory=OUTPUT_DIR,
    path_width=2,
    path_length=9,
    max_paths_in_train=200,
    max_paths_in_test=None,
    nodes_to_numbers=True,
    include_token_types=True,
    file_prefix="python",
    random_seed=42,
)


# ======================================================
# Example processing
# ======================================================
def process_example(example):
    code = example.get("func_code_string", "")
    if not code or not code.strip():
        return []

    try:
        tree = code_to_ast(code)
        # code_search_net holds one function per example
        return list(extract_function_trees(tree))[:1]
    except (SyntaxError, ValueError, RecursionError):
        return []


# ======================================================
# Main
# ======================================================
def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    storages = open_storages(CONFIG, FORMATS)

    written = 0
    skipped = 0

    try:
        for split in SPLITS:
            holdout = Dataset.from_name(split)
            dataset = load_dataset(
                DATASET_NAME,
                LANGUAGE,
                split=split,
                streaming=True,
                trust_remote_code=True,
            )

            in_split = 0
            for example in tqdm(dataset, desc=split):
                if in_split >= MAX_SAMPLES_PER_SPLIT:
                    break

                results = process_example(example)
                if not results:
                    skipped += 1
                    continue

                for labeled_tree in results:
                    for storage in storages:
                        storage.store(labeled_tree, holdout)
                    in_split += 1

            written += in_split
            if in_split < MAX_SAMPLES_PER_SPLIT:
                print(f"[WARN] Split '{split}' exhausted after {in_split} samples")
    finally:
        close_storages(storages)

    for storage in storages:
        storage.print_statistic()

    print("\n===== CODE2SEQ / JSONL BUILD SUMMARY =====")
    print(f"Written samples : {written}")
    print(f"Skipped samples : {skipped}")
    print(f"Output dir      : {OUTPUT_DIR}")


# ======================================================
# Entry point
# ======================================================
if __name__ == "__main__":
    main()
