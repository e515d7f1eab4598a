# ast_corpus/vocab.py
import csv
from collections import Counter
from typing import Dict, Iterable, List, Tuple

FIRST_ID = 1


class NodeTypeVocabulary:
    """
    Node type <-> integer id table built while a corpus is written.

    Ids are handed out on first sight (1, 2, 3, ...) and never change, so an
    id written into a corpus line always matches the persisted table. The
    table is dumped ranked by frequency; the ranking only orders the rows.
    A table read back with from_csv keeps its ids and continues after the
    largest one; counts only cover what was recorded since.
    """

    def __init__(self):
        self.token_to_id: Dict[str, int] = {}
        self.id_to_token: Dict[int, str] = {}
        self.counts: Counter = Counter()
        self.next_id = FIRST_ID

    def __len__(self):
        return len(self.token_to_id)

    def __contains__(self, node_type: str) -> bool:
        return node_type in self.token_to_id

    def record(self, node_type: str) -> int:
        """Count one occurrence of node_type and return its id."""
        self.counts[node_type] += 1
        node_id = self.token_to_id.get(node_type)
        if node_id is None:
            node_id = self.next_id
            self.next_id += 1
            self.token_to_id[node_type] = node_id
            self.id_to_token[node_id] = node_type
        return node_id

    def get_id(self, node_type: str) -> int:
        return self.token_to_id[node_type]

    def encode(self, node_types: Iterable[str]) -> List[int]:
        return [self.token_to_id[t] for t in node_types]

    def decode(self, ids: Iterable[int]) -> List[str]:
        return [self.id_to_token[i] for i in ids]

    def ranked_items(self) -> List[Tuple[str, int]]:
        ranked = sorted(self.token_to_id.items(), key=lambda kv: (-self.counts[kv[0]], kv[1]))
        return ranked

    def dump_csv(self, path: str) -> None:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            for node_type, node_id in self.ranked_items():
                writer.writerow([node_type, node_id])

    @classmethod
    def from_csv(cls, path: str) -> "NodeTypeVocabulary":
        vocab = cls()
        with open(path, "r", encoding="utf-8", newline="") as f:
            for row in csv.reader(f):
                if not row:
                    continue
                if len(row) != 2:
                    raise ValueError(f"Malformed vocabulary row in {path}: {row}")
                node_type, node_id = row[0], int(row[1])
                if node_type in vocab.token_to_id or node_id in vocab.id_to_token:
                    raise ValueError(f"Duplicate vocabulary entry in {path}: {row}")
                vocab.token_to_id[node_type] = node_id
                vocab.id_to_token[node_id] = node_type
                vocab.next_id = max(vocab.next_id, node_id + 1)
        return vocab
