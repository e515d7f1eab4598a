# scripts/02_corpus_stats.py
import os, sys, json, argparse
from collections import Counter
from tqdm import tqdm

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, REPO_ROOT)

from ast_corpus.code2seq import parse_sample
from ast_corpus.json_tree import parse_tree_line


def c2s_stats(path):
    labels = Counter()
    node_types = Counter()
    n_samples = 0
    n_paths = 0
    num_skipped = 0

    with open(path, "r", encoding="utf-8") as f:
        for i, line in enumerate(tqdm(f, desc=os.path.basename(path))):
            try:
                sample = parse_sample(line)
            except ValueError as e:
                num_skipped += 1
                print(f"[WARN] Skipping line {i}: {e}")
                continue
            n_samples += 1
            n_paths += len(sample.path_contexts)
            labels[sample.label] += 1
            for ctx in sample.path_contexts:
                node_types.update(ctx.node_types)

    return {
        "samples": n_samples,
        "paths": n_paths,
        "paths_per_sample": n_paths / n_samples if n_samples else 0.0,
        "distinct_labels": len(labels),
        "top_labels": labels.most_common(10),
        "distinct_node_types": len(node_types),
        "skipped": num_skipped,
    }


def jsonl_stats(path):
    labels = Counter()
    n_samples = 0
    n_nodes = 0
    num_skipped = 0

    with open(path, "r", encoding="utf-8") as f:
        for i, line in enumerate(tqdm(f, desc=os.path.basename(path))):
            try:
                tree = parse_tree_line(line)
            except (ValueError, KeyError) as e:
                num_skipped += 1
                print(f"[WARN] Skipping line {i}: {e}")
                continue
            n_samples += 1
            n_nodes += len(tree.tree)
            labels[tree.label] += 1

    return {
        "samples": n_samples,
        "nodes": n_nodes,
        "nodes_per_sample": n_nodes / n_samples if n_samples else 0.0,
        "distinct_labels": len(labels),
        "top_labels": labels.most_common(10),
        "skipped": num_skipped,
    }


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("paths", nargs="+", help=".c2s or .jsonl corpus files")
    parser.add_argument("--save_json", default=None)
    args = parser.parse_args()

    report = {}
    for path in args.paths:
        if path.endswith(".c2s"):
            report[path] = c2s_stats(path)
        elif path.endswith(".jsonl"):
            report[path] = jsonl_stats(path)
        else:
            print(f"[WARN] Unknown corpus extension, skipping {path}")

    print(json.dumps(report, indent=2, ensure_ascii=False))

    if args.save_json:
        with open(args.save_json, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        print(f"[OK] Saved stats to {args.save_json}")


if __name__ == "__main__":
    main()
