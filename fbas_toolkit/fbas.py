"""Core FBAS data types and their JSON representation."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


def _parse_error(message: str) -> ValueError:
    return ValueError(f"Error parsing FBAS JSON: {message}")


@dataclass(order=True)
class QuorumSet:
    """A (possibly nested) quorum set of node IDs with a threshold."""

    validators: list[int] = field(default_factory=list)
    inner_quorum_sets: list[QuorumSet] = field(default_factory=list)
    threshold: int = 0

    @classmethod
    def new_empty(cls) -> QuorumSet:
        """An empty quorum set with threshold 0."""
        return cls()

    @classmethod
    def new_unsatisfiable(cls) -> QuorumSet:
        """An empty quorum set with threshold 1, which no node set can satisfy."""
        return cls(threshold=1)

    def contained_nodes(self) -> set[int]:
        """All node IDs appearing in this quorum set or any nested quorum set."""
        nodes = set(self.validators)
        for inner in self.inner_quorum_sets:
            nodes |= inner.contained_nodes()
        return nodes

    def to_dict(self, fbas: Fbas) -> dict[str, Any]:
        """Serializable form, using public keys from ``fbas`` for node IDs."""
        validators = [
            fbas.nodes[v].public_key if 0 <= v < len(fbas.nodes) else f"missing #{v}"
            for v in self.validators
        ]
        result: dict[str, Any] = {"threshold": self.threshold, "validators": validators}
        if self.inner_quorum_sets:
            result["innerQuorumSets"] = [q.to_dict(fbas) for q in self.inner_quorum_sets]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], pk_to_id: Mapping[str, int]) -> QuorumSet:
        """Build a quorum set from its JSON form; unknown public keys are dropped."""
        if not isinstance(data, Mapping):
            raise _parse_error("quorum set must be an object")
        threshold = data.get("threshold")
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
            raise _parse_error("threshold must be a non-negative integer")
        raw_validators = data.get("validators")
        if not isinstance(raw_validators, list) or not all(
            isinstance(pk, str) for pk in raw_validators
        ):
            raise _parse_error("validators must be a list of public keys")
        raw_inner = data.get("innerQuorumSets", [])
        if raw_inner is None:
            raw_inner = []
        if not isinstance(raw_inner, list):
            raise _parse_error("innerQuorumSets must be a list")
        # sorted to make comparisons between quorum sets easier
        validators = sorted(pk_to_id[pk] for pk in raw_validators if pk in pk_to_id)
        inner_quorum_sets = sorted(cls.from_dict(q, pk_to_id) for q in raw_inner)
        return cls(validators=validators, inner_quorum_sets=inner_quorum_sets, threshold=threshold)


@dataclass
class Node:
    """A node identified by its public key, together with its quorum set."""

    public_key: str
    quorum_set: QuorumSet = field(default_factory=QuorumSet.new_empty)


@dataclass
class Fbas:
    """A federated byzantine agreement system: nodes indexed by their ID."""

    nodes: list[Node] = field(default_factory=list)
    pk_to_id: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_json_str(cls, json_text: str) -> Fbas:
        try:
            raw_nodes = json.loads(json_text)
        except json.JSONDecodeError as exc:
            raise _parse_error(str(exc)) from exc
        return cls.from_list(raw_nodes)

    @classmethod
    def from_json_file(cls, path: str | Path) -> Fbas:
        return cls.from_json_str(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def from_json_stdin(cls) -> Fbas:
        return cls.from_json_str(sys.stdin.read())

    def to_json_string(self) -> str:
        return json.dumps(self.to_list(), separators=(",", ":"))

    def to_json_string_pretty(self) -> str:
        return json.dumps(self.to_list(), indent=2)

    def __str__(self) -> str:
        return self.to_json_string_pretty()

    def to_list(self) -> list[dict[str, Any]]:
        """Serializable form: a list of nodes with public keys and quorum sets."""
        return [
            {"publicKey": node.public_key, "quorumSet": node.quorum_set.to_dict(self)}
            for node in self.nodes
        ]

    @classmethod
    def from_list(cls, raw_nodes: Any) -> Fbas:
        """Build an FBAS from decoded JSON; node IDs follow list order."""
        if not isinstance(raw_nodes, list):
            raise _parse_error("expected a list of nodes")
        for raw in raw_nodes:
            if not isinstance(raw, Mapping) or not isinstance(raw.get("publicKey"), str):
                raise _parse_error("every node needs a string publicKey")
        pk_to_id = {raw["publicKey"]: node_id for node_id, raw in enumerate(raw_nodes)}
        nodes = []
        for raw in raw_nodes:
            raw_quorum_set = raw.get("quorumSet")
            # A node without a quorum set is assumed to be broken, i.e., unsatisfiable.
            if raw_quorum_set is None:
                quorum_set = QuorumSet.new_unsatisfiable()
            else:
                quorum_set = QuorumSet.from_dict(raw_quorum_set, pk_to_id)
            nodes.append(Node(raw["publicKey"], quorum_set))
        return cls(nodes=nodes, pk_to_id=pk_to_id)

    def add_generic_node(self, quorum_set: QuorumSet) -> int:
        """Append a node named after its ID and return that ID."""
        node_id = len(self.nodes)
        public_key = str(node_id)
        self.nodes.append(Node(public_key, quorum_set))
        self.pk_to_id[public_key] = node_id
        return node_id

    @classmethod
    def new_generic_unconfigured(cls, n: int) -> Fbas:
        """An FBAS of ``n`` generic nodes, all with empty quorum sets."""
        fbas = cls()
        for _ in range(n):
            fbas.add_generic_node(QuorumSet.new_empty())
        return fbas

    def number_of_nodes(self) -> int:
        return len(self.nodes)