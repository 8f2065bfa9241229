# copa_unique/performance/normalization.py
"""
Record normalization for the Performance Module.

Runs once, before any aggregation:
- Department names mapped to the canonical "NN - NAME" form via an alias table
- Missing text fields replaced by sentinels ("Outros", "Não informado", ...)
- Dates coerced to datetime, amounts to numbers (invalid -> 0)
- Seller attribution resolved (attributed_to_user_id, then user_id)

The alias table is a JSON file shipped with the package. Set
DEPARTMENT_ALIASES_PATH to replace it without touching code.
"""

import json
import logging
import re
from dataclasses import asdict, is_dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd

from .constants import (
    DEPARTMENT_SENTINEL,
    FIELD_SENTINEL,
    EXECUTOR_SENTINEL,
    TEXT_FIELDS,
    RECORD_KINDS,
)

logger = logging.getLogger(__name__)

DEFAULT_ALIASES_PATH = Path(__file__).parent / "data" / "department_aliases.json"

CANONICAL_DEPARTMENT = re.compile(r"^\d{2} - .+")

# Columns guaranteed after normalization, per record kind
KIND_COLUMNS = {
    'revenue': ['date', 'amount', 'department', 'procedure_name', 'origin', 'patient_name',
                'attributed_to_user_id', 'user_id', 'team_id', 'country'],
    'executed': ['date', 'amount', 'department', 'procedure_name', 'origin', 'patient_name',
                 'attributed_to_user_id', 'user_id', 'team_id', 'country', 'executor_name'],
    'engagement': ['date', 'kind', 'user_id', 'team_id', 'points'],
    'lead': ['created_at', 'status', 'temperature'],
    'cancellation': ['request_date', 'status', 'contract_value'],
    'rfv': ['segment', 'total_value'],
}

DATE_COLUMN = {
    'revenue': 'date',
    'executed': 'date',
    'engagement': 'date',
    'lead': 'created_at',
    'cancellation': 'request_date',
}

AMOUNT_COLUMN = {
    'revenue': 'amount',
    'executed': 'amount',
    'engagement': 'points',
    'cancellation': 'contract_value',
    'rfv': 'total_value',
}


# =====================================================================
# ALIAS TABLE
# =====================================================================

@lru_cache(maxsize=8)
def load_department_aliases(path: Optional[str] = None) -> Dict[str, str]:
    """
    Load the department alias table (cached per path).

    Keys are stored trimmed and lower-cased so lookups are exact on that form.

    Raises:
        ValueError: if the file is not a JSON object of strings
    """
    source = Path(path) if path else DEFAULT_ALIASES_PATH
    with open(source, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Department alias table must be a JSON object: {source}")

    aliases = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ValueError(f"Invalid alias entry {key!r} -> {value!r} in {source}")
        aliases[key.strip().lower()] = value

    logger.info(f"Loaded {len(aliases)} department aliases from {source}")
    return aliases


def _configured_aliases() -> Dict[str, str]:
    from ..config import config
    return load_department_aliases(config.get_department_aliases_path())


# =====================================================================
# DEPARTMENT
# =====================================================================

def normalize_department(raw, aliases: Optional[Dict[str, str]] = None) -> str:
    """
    Map a raw department value to its canonical name.

    Order: blank -> "Outros"; known alias -> canonical; canonical "NN - NAME"
    passes unchanged; anything else passes verbatim.

    Examples:
        normalize_department(None)                 -> "Outros"
        normalize_department("cirurgia_plastica")  -> "01 - CIRURGIA PLÁSTICA"
        normalize_department("07 - ALREADY CODED") -> "07 - ALREADY CODED"
    """
    if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
        return DEPARTMENT_SENTINEL

    text = str(raw).strip()
    if not text:
        return DEPARTMENT_SENTINEL

    if aliases is None:
        aliases = _configured_aliases()

    mapped = aliases.get(text.lower())
    if mapped is not None:
        return mapped

    if CANONICAL_DEPARTMENT.match(text):
        return text

    return str(raw)


# =====================================================================
# FRAMES
# =====================================================================

def to_frame(records: Union[pd.DataFrame, Iterable, None]) -> pd.DataFrame:
    """Accept a DataFrame, a sequence of dataclasses or a sequence of dicts."""
    if records is None:
        return pd.DataFrame()
    if isinstance(records, pd.DataFrame):
        return records.copy()

    rows = []
    for record in records:
        if is_dataclass(record):
            rows.append(asdict(record))
        elif isinstance(record, dict):
            rows.append(dict(record))
        else:
            raise TypeError(f"Unsupported record type: {type(record).__name__}")

    return pd.DataFrame(rows)


def text_or_default(value, default: str) -> str:
    """Stripped text of a cell, or default for None, NaN and blanks."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    text = str(value).strip()
    return text if text else default


def _fill_text(series: pd.Series, sentinel: str) -> pd.Series:
    cleaned = series.astype("object").where(series.notna(), None)
    return cleaned.map(lambda v: sentinel if v is None or not str(v).strip() else v)


def normalize_records(
    records,
    kind: str = 'revenue',
    aliases: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """
    Normalize a record set of the given kind.

    Rows whose date cannot be parsed are dropped (logged at warning level);
    every other row is kept with sentinels substituted.

    Args:
        records: DataFrame or sequence of dataclasses/dicts
        kind: One of RECORD_KINDS
        aliases: Department alias table (defaults to the configured table)

    Returns:
        DataFrame with every column of KIND_COLUMNS[kind] present
    """
    if kind not in RECORD_KINDS:
        raise ValueError(f"Unknown record kind: {kind}")

    df = to_frame(records)

    for col in KIND_COLUMNS[kind]:
        if col not in df.columns:
            df[col] = None

    date_col = DATE_COLUMN.get(kind)
    if date_col:
        df[date_col] = pd.to_datetime(df[date_col], errors='coerce')
        invalid = df[date_col].isna()
        if invalid.any():
            logger.warning(f"Dropping {int(invalid.sum())} {kind} record(s) without a valid date")
            df = df.loc[~invalid].copy()

    amount_col = AMOUNT_COLUMN.get(kind)
    if amount_col:
        df[amount_col] = pd.to_numeric(df[amount_col], errors='coerce').fillna(0).astype(float)

    if kind in ('revenue', 'executed'):
        if aliases is None:
            aliases = _configured_aliases()
        df['department'] = df['department'].map(lambda v: normalize_department(v, aliases))

        for col in TEXT_FIELDS:
            df[col] = _fill_text(df[col], FIELD_SENTINEL)

        attributed = df['attributed_to_user_id'].astype("object").where(
            df['attributed_to_user_id'].notna(), None
        )
        df['seller_id'] = attributed.where(attributed.notna(), df['user_id'])

        if kind == 'executed':
            df['executor_name'] = _fill_text(df['executor_name'], EXECUTOR_SENTINEL)

    elif kind in ('lead', 'cancellation'):
        for col in ('status', 'temperature'):
            if col in df.columns:
                df[col] = df[col].map(lambda v: str(v).strip().lower() if pd.notna(v) else '')

    elif kind == 'rfv':
        df['segment'] = _fill_text(df['segment'], FIELD_SENTINEL)

    elif kind == 'engagement':
        df['kind'] = df['kind'].map(lambda v: str(v).strip().lower() if pd.notna(v) else '')

    return df.reset_index(drop=True)


__all__ = [
    'load_department_aliases',
    'normalize_department',
    'normalize_records',
    'to_frame',
    'text_or_default',
    'KIND_COLUMNS',
]
