"""
Member records and the sources they are loaded from.

A MemberRecord is one row of the family table. Rows come either from a
Supabase table over its REST interface or from a CSV export of the same
table. Both sources accept the database's snake_case column names as well as
the camelCase names used by JSON clients.

Main entry point: `load_records(config)`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd
import requests

from .config import AppConfig

logger = logging.getLogger(__name__)


class RecordSourceError(RuntimeError):
    """The record source could not be reached or returned unusable data."""


# column name -> alternative spelling accepted in input rows
_ALIASES = {
    "parent_id": "parentId",
    "spouse_id": "spouseId",
    "birth_year": "birthYear",
    "phone_number": "phoneNumber",
}


@dataclass(frozen=True)
class MemberRecord:
    id: int
    name: str
    generation: Optional[int] = None
    parent_id: Optional[int] = None
    spouse_id: Optional[int] = None
    birth_year: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MemberRecord":
        """
        Build a record from one table row.

        Raises RecordSourceError if the row has no usable id or name.
        """
        record_id = _to_int(_get(row, "id"))
        if record_id is None:
            raise RecordSourceError(f"Member row without an id: {dict(row)!r}")
        name = _to_text(_get(row, "name"))
        if name is None:
            raise RecordSourceError(f"Member {record_id} has no name")

        return cls(
            id=record_id,
            name=name,
            generation=_to_int(_get(row, "generation")),
            parent_id=_to_int(_get(row, "parent_id")),
            spouse_id=_to_int(_get(row, "spouse_id")),
            birth_year=_to_text(_get(row, "birth_year")),
            phone_number=_to_text(_get(row, "phone_number")),
            address=_to_text(_get(row, "address")),
            notes=_to_text(_get(row, "notes")),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "generation": self.generation,
            "parent_id": self.parent_id,
            "spouse_id": self.spouse_id,
            "birth_year": self.birth_year,
            "phone_number": self.phone_number,
            "address": self.address,
            "notes": self.notes,
        }


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def _get(row: Mapping[str, Any], key: str) -> Any:
    if key in row:
        return row[key]
    alias = _ALIASES.get(key)
    if alias is not None:
        return row.get(alias)
    return None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return value is pd.NA


def _to_int(value: Any) -> Optional[int]:
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        raise RecordSourceError(f"Expected an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise RecordSourceError(f"Expected an integer, got {value!r}")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise RecordSourceError(f"Expected an integer, got {value!r}") from None


def _to_text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    # pandas reads year-like columns as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_records(rows: Sequence[Mapping[str, Any]]) -> List[MemberRecord]:
    return [MemberRecord.from_row(row) for row in rows]


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def fetch_records(cfg: AppConfig, session=None) -> List[MemberRecord]:
    """
    Fetch all members from the Supabase table, ordered by generation.

    `session` may be any object with a requests-style `get`; a plain
    `requests` call is used when it is None.
    """
    if not cfg.supabase_url:
        raise RecordSourceError("No Supabase URL configured")

    url = f"{cfg.supabase_url.rstrip('/')}/rest/v1/{cfg.table}"
    headers = {
        "apikey": cfg.supabase_key,
        "Authorization": f"Bearer {cfg.supabase_key}",
        "Accept": "application/json",
    }
    params = {"select": "*", "order": "generation.asc"}
    http = session if session is not None else requests

    logger.info("Fetching members from %s", url)
    try:
        resp = http.get(url, headers=headers, params=params, timeout=cfg.request_timeout)
    except requests.RequestException as e:
        raise RecordSourceError(f"Could not reach record store: {e}") from e

    if resp.status_code != 200:
        raise RecordSourceError(
            f"Record store returned HTTP {resp.status_code}: {resp.text[:200]}"
        )
    try:
        rows = resp.json()
    except ValueError as e:
        raise RecordSourceError("Record store returned invalid JSON") from e
    if not isinstance(rows, list):
        raise RecordSourceError("Record store returned an unexpected payload")

    records = parse_records(rows)
    logger.info("Fetched %d members", len(records))
    return records


def load_records_csv(source) -> List[MemberRecord]:
    """Load members from a CSV path or uploaded file, ordered by generation."""
    try:
        df = pd.read_csv(source)
    except (OSError, ValueError) as e:
        raise RecordSourceError(f"Could not read members CSV: {e}") from e

    if "generation" in df.columns:
        df = df.sort_values("generation", kind="mergesort", na_position="last")

    records = parse_records(df.to_dict("records"))
    logger.info("Loaded %d members from CSV", len(records))
    return records


def load_records(cfg: AppConfig, session=None) -> List[MemberRecord]:
    """Load members from Supabase when configured, else from the CSV file."""
    if cfg.supabase_url:
        return fetch_records(cfg, session=session)
    if cfg.records_csv:
        return load_records_csv(cfg.records_csv)
    raise RecordSourceError(
        "No record source configured. Set SUPABASE_URL or RECORDS_CSV."
    )


def records_frame(records: Sequence[MemberRecord]) -> pd.DataFrame:
    columns = list(MemberRecord.__dataclass_fields__)
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([r.to_row() for r in records], columns=columns)
