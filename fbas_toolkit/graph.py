"""Directed graphs used for quorum set simulation, and AS relationship files."""

from __future__ import annotations

import bz2
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

_PARSE_ERROR = "Error parsing AS Relationships data"


def _parse_node_id(text: str) -> int:
    if not text.isdigit() or not text.isascii():
        raise ValueError(_PARSE_ERROR)
    return int(text)


def parse_as_rel_line(line: str) -> tuple[int, int, bool] | None:
    """Parse one ``sink|source|relation`` line.

    Returns None for empty and comment lines; the flag tells whether the link
    is a peering (bidirectional) link.
    """
    if not line or line.startswith("#"):
        return None
    parts = line.split("|")
    if len(parts) < 3:
        raise ValueError(_PARSE_ERROR)
    sink = _parse_node_id(parts[0])
    source = _parse_node_id(parts[1])
    try:
        relation = int(parts[2].strip() if False else parts[2])
    except ValueError as exc:
        raise ValueError(_PARSE_ERROR) from exc
    if relation == -1:
        peering = False
    elif relation == 0:
        peering = True
    else:
        raise ValueError(_PARSE_ERROR)
    return sink, source, peering


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass
class Graph:
    """A directed graph given by the outgoing links of each node."""

    outlinks: list[list[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        logger.info("New graph with %d nodes.", len(self.outlinks))

    @classmethod
    def new_full_mesh(cls, n: int) -> Graph:
        """A complete graph on ``n`` nodes."""
        return cls([[j for j in range(n) if j != i] for i in range(n)])

    @classmethod
    def new_tiered_full_mesh(cls, tier_sizes: Sequence[int]) -> Graph:
        """Fully meshed tiers, each node also linking to every node of the next higher tier."""
        outlinks: list[list[int]] = [[] for _ in range(sum(tier_sizes))]
        higher_tier: list[int] = []
        for tier_size in tier_sizes:
            start = higher_tier[-1] + 1 if higher_tier else 0
            end = start + tier_size
            for i in range(start, end):
                outlinks[i].extend(higher_tier)
                outlinks[i].extend(j for j in range(start, end) if j != i)
            higher_tier = list(range(start, end))
        return cls(outlinks)

    @classmethod
    def new_random_scale_free(cls, n: int, m0: int, m: int) -> Graph:
        """A scale-free graph following the Barabási–Albert model."""
        if not (0 < m <= m0 and m <= n):
            raise ValueError("Parameters for Barabási–Albert don't make sense.")
        outlinks: list[list[int]] = [[] for _ in range(n)]

        def connect(a: int, b: int) -> None:
            outlinks[a].append(b)
            outlinks[b].append(a)

        for i in range(m0):
            for j in range(i + 1, m0):
                connect(i, j)

        for i in range(m0, n):
            possible_targets = list(range(i))
            for _ in range(m):
                weights = [len(outlinks[x]) for x in possible_targets]
                if not possible_targets or sum(weights) == 0:
                    raise ValueError("No target with nonzero weight to connect to.")
                j = random.choices(possible_targets, weights=weights)[0]
                connect(i, j)
                possible_targets = [x for x in possible_targets if x != j]
        return cls(outlinks)

    @classmethod
    def new_random_small_world(cls, n: int, k: int, beta: float) -> Graph:
        """A small-world graph following the Watts-Strogatz model."""
        if k % 2 != 0:
            raise ValueError("For the Watts-Strogatz model, `k` must be an even number!")
        if k > n:
            raise ValueError("For the Watts-Strogatz model, `k` must not exceed `n`!")
        if not 0.0 <= beta <= 1.0:
            raise ValueError("`beta` must be a probability between 0 and 1.")

        matrix = [[False] * n for _ in range(n)]
        for i in range(n):
            for j in range(i + 1, i + k // 2 + 1):
                j %= n
                matrix[i][j] = True
                matrix[j][i] = True

        possible_targets = [
            [j for j in range(n) if i != j and not matrix[i][j] and not matrix[j][i]]
            for i in range(n)
        ]

        for i in range(n):
            to_be_rewired = []
            for j in range(i + 1, i + k // 2 + 1):
                j %= n
                if matrix[i][j] and random.random() < beta:
                    to_be_rewired.append(j)
            for j in to_be_rewired:
                if not possible_targets[i]:
                    continue
                new_j = random.choice(possible_targets[i])
                matrix[i][j] = matrix[j][i] = False
                matrix[i][new_j] = matrix[new_j][i] = True
                possible_targets[i].append(j)
                possible_targets[j].append(i)
                possible_targets[i] = [x for x in possible_targets[i] if x != new_j]
                possible_targets[new_j] = [x for x in possible_targets[new_j] if x != i]

        return cls([[j for j, linked in enumerate(row) if linked] for row in matrix])

    def shuffled(self) -> Graph:
        """A copy of this graph with randomly permuted node IDs."""
        n = len(self.outlinks)
        old_to_new = list(range(n))
        random.shuffle(old_to_new)
        new_to_old = [0] * n
        for old, new in enumerate(old_to_new):
            new_to_old[new] = old
        return Graph([[old_to_new[oj] for oj in self.outlinks[oi]] for oi in new_to_old])

    def is_undirected(self) -> bool:
        return all(
            i in self.outlinks[j] for i, links in enumerate(self.outlinks) for j in links
        )

    def number_of_nodes(self) -> int:
        return len(self.outlinks)

    def get_in_degrees(self) -> list[int]:
        degrees = [0] * len(self.outlinks)
        for links in self.outlinks:
            for target in links:
                degrees[target] += 1
        return degrees

    def get_out_degrees(self) -> list[int]:
        return [len(links) for links in self.outlinks]

    def get_connected_nodes(self) -> set[int]:
        """All nodes with nonzero degree."""
        result: set[int] = set()
        for i, links in enumerate(self.outlinks):
            if links:
                result.add(i)
                result.update(links)
        return result

    def get_rank_scores(self) -> list[float]:
        """Simplified page rank: no dampening, bounded number of runs, fixed epsilon."""
        n = self.number_of_nodes()
        if n == 0:
            return []
        starting_score = 1.0 / n
        max_runs = max(2 * n, 1000)
        epsilon = max(starting_score / n, 0.00001)

        scores = [starting_score] * n
        for _ in range(max_runs):
            last_scores = scores
            scores = [0.0] * n
            for i, links in enumerate(self.outlinks):
                if links:
                    share = last_scores[i] / len(links)
                    for j in links:
                        scores[j] += share
            if all(abs(x - y) < epsilon for x, y in zip(scores, last_scores)):
                break
        return scores

    @classmethod
    def from_as_rel_string(cls, contents: str) -> Graph:
        """Build a graph from AS relationship lines; duplicate links are merged."""
        outlinks: list[set[int]] = []
        for line in _lines(contents):
            edge = parse_as_rel_line(line)
            if edge is None:
                continue
            sink, source, peering = edge
            needed = max(sink, source) + 1
            if len(outlinks) < needed:
                outlinks.extend(set() for _ in range(needed - len(outlinks)))
            outlinks[source].add(sink)
            if peering:
                outlinks[sink].add(source)
        return cls([sorted(links) for links in outlinks])

    @classmethod
    def from_as_rel_file(cls, path: str | Path) -> Graph:
        """Read an AS relationship file, bzip2-compressed or plain."""
        try:
            with bz2.open(path, "rt", encoding="utf-8") as compressed:
                contents = compressed.read()
        except (OSError, EOFError, UnicodeDecodeError):
            contents = Path(path).read_text(encoding="utf-8")
        return cls.from_as_rel_string(contents)

    def to_as_rel_string(self, head_comment: str | None = None) -> str:
        """AS relationship lines: ``0`` for bidirectional, ``-1`` for one-way links."""
        lines = []
        if head_comment is not None:
            lines.append(f"# {head_comment}\n")
        for i, links in enumerate(self.outlinks):
            for j in links:
                is_undirected = i in self.outlinks[j]
                if is_undirected and i < j:
                    lines.append(f"{i}|{j}|0\n")
                elif not is_undirected:
                    lines.append(f"{i}|{j}|-1\n")
        return "".join(lines)

    def to_as_rel_file(self, path: str | Path, head_comment: str | None = None) -> None:
        """Write the graph as a bzip2-compressed AS relationship file."""
        with bz2.open(path, "wt", compresslevel=9, encoding="utf-8") as compressed:
            compressed.write(self.to_as_rel_string(head_comment))