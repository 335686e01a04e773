"""Certificate authority policy OIDs and their DV/OV/EV classification."""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from typing import Any

from .sqlutil import SQLDataLoader, to_sql_line, to_sql_string

RECMAX = 10000
OID_LOAD_PARAMS = "INTO TABLE capolicies"

_OID_RE = re.compile(r"(?:\d+\.)+\d+", re.ASCII)


def is_oid(s: str) -> bool:
    """True if ``s`` has OID syntax: two or more dot-separated numbers."""
    return _OID_RE.fullmatch(s) is not None


def parse_oids(s: str) -> list[str]:
    """Return the whitespace-separated words of ``s`` that are OIDs."""
    return [item for item in s.split() if is_oid(item)]


@dataclass(frozen=True)
class PolicyInfo:
    """Classification of one policy OID."""

    policy: str  # "DV", "OV" or "EV"
    ca_name: str


class CAPolicyInfo:
    """Policy OIDs of certificate authorities, keyed by OID."""

    def __init__(self) -> None:
        self._policies: dict[str, PolicyInfo] | None = None

    @staticmethod
    def _add_line(policies: dict[str, PolicyInfo], fields: list[str]) -> None:
        if len(fields) < 4:
            return
        ca_name = fields[0]
        for policy, text in zip(("DV", "OV", "EV"), fields[1:4]):
            for oid in parse_oids(text):
                policies[oid] = PolicyInfo(policy, ca_name)

    def load(self, path: str) -> None:
        """Load a CSV of CA name, DV OIDs, OV OIDs, EV OIDs, CPS URL, notes.

        OID columns may hold several OIDs mixed with other text.
        """
        policies: dict[str, PolicyInfo] = {}
        self._policies = None
        with open(path, encoding="utf-8", newline="") as fh:
            reader = csv.reader(fh)
            expected: int | None = None
            try:
                for fields in reader:
                    if not fields:
                        continue
                    if expected is None:
                        expected = len(fields)
                    elif len(fields) != expected:
                        raise ValueError(
                            f"line {reader.line_num}: wrong number of fields in {path}"
                        )
                    self._add_line(policies, fields)
            except csv.Error as err:
                raise ValueError(f"line {reader.line_num}: {err}") from err
        if not policies:
            raise ValueError(f"No CA policy OIDs found in OID file: {path}")
        self._policies = policies

    def get_policy(self, oid: str) -> PolicyInfo | None:
        """Return the policy for ``oid``, or None if it is unknown."""
        if self._policies is None:
            raise RuntimeError("get_policy called without policies loaded.")
        return self._policies.get(oid)

    def dump(self) -> None:
        """Print the loaded policies for debugging."""
        print("CA Policy info:")
        if self._policies is None:
            print("  Not loaded.")
            return
        for oid, info in sorted(self._policies.items()):
            print(f"  Policy: {info.policy}.  OID: '{oid}'  CA name: {info.ca_name}")
        print("")


def insert_oids(connection: Any, info: CAPolicyInfo, verbose: bool = False) -> None:
    """Bulk-load the OID table into the ``capolicies`` database table."""
    if verbose:
        print("Loading CA OID list for DV/OV/EV distinction.")
    with SQLDataLoader(OID_LOAD_PARAMS, connection, RECMAX, verbose) as loader:
        for oid, policy in (info._policies or {}).items():
            fields = [to_sql_string(oid), to_sql_string(policy.ca_name), policy.policy]
            if verbose:
                print(f" Loaded OID {fields[0]} from {fields[1]} ({fields[2]})")
            loader.write(to_sql_line(fields))