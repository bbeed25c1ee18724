"""Selecting nodes from FBAS JSON by a predicate over their raw records."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable


@dataclass
class FilteredNodes:
    """Public keys of nodes whose raw JSON record matched a predicate."""

    public_keys: list[str] = field(default_factory=list)

    @classmethod
    def from_json_str(cls, json_text: str, predicate: Callable[[Any], bool]) -> FilteredNodes:
        """Filter nodes; input that is not a JSON array yields no nodes."""
        try:
            values = json.loads(json_text)
        except json.JSONDecodeError:
            return cls()
        if not isinstance(values, list):
            return cls()
        public_keys = []
        for value in values:
            if predicate(value):
                public_key = value.get("publicKey") if isinstance(value, dict) else None
                if not isinstance(public_key, str):
                    raise ValueError("Node without publicKey!")
                public_keys.append(public_key)
        return cls(public_keys)

    @classmethod
    def from_json_file(cls, path: str | Path, predicate: Callable[[Any], bool]) -> FilteredNodes:
        return cls.from_json_str(Path(path).read_text(encoding="utf-8"), predicate)

    def into_pretty_vec(self) -> list[str]:
        return list(self.public_keys)