"""Groupings of nodes (organizations, ISPs, countries) and their JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from .fbas import Fbas


def _load(json_text: str, what: str) -> Any:
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Error parsing {what} JSON: {exc}") from exc


def _clean_name(name: str) -> str:
    """Drop commas and a single trailing period from a grouping name."""
    name = name.replace(",", "")
    if name.endswith("."):
        name = name[:-1]
    return name


def _raw_nodes(json_text: str) -> list[Mapping[str, Any]]:
    raw_nodes = _load(json_text, "FBAS")
    if not isinstance(raw_nodes, list):
        raise ValueError("Error parsing FBAS JSON: expected a list of nodes")
    for raw in raw_nodes:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("publicKey"), str):
            raise ValueError("Error parsing FBAS JSON: every node needs a string publicKey")
    return raw_nodes


def _group_by_name(pairs: Iterable[tuple[str, str]]) -> list[dict[str, Any]]:
    """Collect (name, public key) pairs into raw groupings sorted by name."""
    by_name: dict[str, list[str]] = {}
    for name, public_key in pairs:
        by_name.setdefault(_clean_name(name), []).append(public_key)
    return [{"name": name, "validators": by_name[name]} for name in sorted(by_name)]


def _isp_pairs(raw_nodes: list[Mapping[str, Any]]) -> Iterable[tuple[str, str]]:
    for raw in raw_nodes:
        isp = raw.get("isp")
        if isp is None:
            continue
        if not isinstance(isp, str):
            raise ValueError("Error parsing FBAS JSON: isp must be a string")
        yield isp, raw["publicKey"]


def _country_pairs(raw_nodes: list[Mapping[str, Any]]) -> Iterable[tuple[str, str]]:
    for raw in raw_nodes:
        geo_data = raw.get("geoData")
        if geo_data is None:
            continue
        if not isinstance(geo_data, Mapping):
            raise ValueError("Error parsing FBAS JSON: geoData must be an object")
        country = geo_data.get("countryName")
        if country is None or country == "":
            continue
        if not isinstance(country, str):
            raise ValueError("Error parsing FBAS JSON: countryName must be a string")
        yield country, raw["publicKey"]


@dataclass
class Grouping:
    """A named group of node IDs."""

    name: str
    validators: list[int] = field(default_factory=list)


@dataclass
class Groupings:
    """A list of groupings over the nodes of one FBAS."""

    groupings: list[Grouping]
    fbas: Fbas = field(repr=False)
    _member_index: dict[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._member_index = {}
        for index, grouping in enumerate(self.groupings):
            for node_id in grouping.validators:
                self._member_index.setdefault(node_id, index)

    @classmethod
    def _from_raw(cls, raw_groupings: Any, fbas: Fbas, what: str) -> Groupings:
        if not isinstance(raw_groupings, list):
            raise ValueError(f"Error parsing {what} JSON: expected a list of groupings")
        groupings = []
        for raw in raw_groupings:
            if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
                raise ValueError(f"Error parsing {what} JSON: every grouping needs a name")
            validators = raw.get("validators")
            if not isinstance(validators, list) or not all(
                isinstance(pk, str) for pk in validators
            ):
                raise ValueError(f"Error parsing {what} JSON: validators must be public keys")
            node_ids = [fbas.pk_to_id[pk] for pk in validators if pk in fbas.pk_to_id]
            groupings.append(Grouping(raw["name"], node_ids))
        return cls(groupings, fbas)

    @classmethod
    def from_json_str(cls, json_text: str, fbas: Fbas) -> Groupings:
        return cls._from_raw(_load(json_text, "Groupings"), fbas, "Groupings")

    @classmethod
    def organizations_from_json_str(cls, json_text: str, fbas: Fbas) -> Groupings:
        return cls._from_raw(_load(json_text, "Organizations"), fbas, "Organizations")

    @classmethod
    def isps_from_json_str(cls, json_text: str, fbas: Fbas) -> Groupings:
        """Group nodes by the ``isp`` field of their JSON records."""
        raw = _group_by_name(_isp_pairs(_raw_nodes(json_text)))
        return cls._from_raw(raw, fbas, "Groupings")

    @classmethod
    def countries_from_json_str(cls, json_text: str, fbas: Fbas) -> Groupings:
        """Group nodes by ``geoData.countryName``; empty names are ignored."""
        raw = _group_by_name(_country_pairs(_raw_nodes(json_text)))
        return cls._from_raw(raw, fbas, "Groupings")

    @classmethod
    def from_json_file(cls, path: str | Path, fbas: Fbas) -> Groupings:
        return cls.from_json_str(Path(path).read_text(encoding="utf-8"), fbas)

    @classmethod
    def organizations_from_json_file(cls, path: str | Path, fbas: Fbas) -> Groupings:
        return cls.organizations_from_json_str(Path(path).read_text(encoding="utf-8"), fbas)

    @classmethod
    def isps_from_json_file(cls, path: str | Path, fbas: Fbas) -> Groupings:
        return cls.isps_from_json_str(Path(path).read_text(encoding="utf-8"), fbas)

    @classmethod
    def countries_from_json_file(cls, path: str | Path, fbas: Fbas) -> Groupings:
        return cls.countries_from_json_str(Path(path).read_text(encoding="utf-8"), fbas)

    def get_by_member(self, node_id: int) -> Grouping | None:
        """The grouping containing ``node_id``, or None."""
        index = self._member_index.get(node_id)
        return None if index is None else self.groupings[index]

    def to_list(self) -> list[dict[str, Any]]:
        """Serializable form, with public keys in place of node IDs."""
        return [
            {
                "name": grouping.name,
                "validators": [self.fbas.nodes[v].public_key for v in grouping.validators],
            }
            for grouping in self.groupings
        ]

    def to_json_string(self) -> str:
        return json.dumps(self.to_list(), separators=(",", ":"))