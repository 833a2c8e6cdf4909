"""Lenient coercion for caller-supplied activity documents.

Student records arrive from storage with missing blocks, nulls, strings where
numbers belong, and the occasional garbage entry in an append-only list. The
engine never rejects such input: every value here degrades to an empty/zero
default instead of raising.
"""

import math
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Annotated, Any, Optional

from dateutil import parser as dateutil_parser
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


class LenientModel(BaseModel):
    """Base for snapshot models: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def to_number(value: Any) -> float:
    """Coerce to a finite float, 0.0 on failure."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3, -2.5 -> -2); ``round`` goes to even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_count(value: Any) -> int:
    """Coerce to a non-negative int."""
    return max(0, int(to_number(value)))


def to_optional_number(value: Any) -> Optional[float]:
    """Coerce to a finite float, None when absent or unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_timestamp(value: Any) -> Optional[datetime]:
    """Coerce to an aware datetime (naive values are taken as UTC)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        # Epoch milliseconds are what most JS-facing stores hand back
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = dateutil_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def to_list(value: Any) -> list:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return []


def to_record_list(value: Any) -> list:
    """Keep only mapping-like entries of a list of sub-documents."""
    return [item for item in to_list(value) if isinstance(item, (Mapping, BaseModel))]


def to_text_list(value: Any) -> list[str]:
    """Convert comma-separated strings or mixed lists to a list of strings."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in to_list(value) if item is not None and str(item).strip()]


def to_score_map(value: Any) -> dict[str, float]:
    """Coerce a skill -> proficiency mapping (or a list of pairs)."""
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, (list, tuple)):
        items = [
            (entry.get("skill") or entry.get("name"), entry.get("value", entry.get("score")))
            for entry in value
            if isinstance(entry, Mapping)
        ]
    else:
        return {}
    return {str(key): to_number(score) for key, score in items if key}


def to_block(value: Any) -> Any:
    """Optional nested block: anything that is not a mapping becomes None."""
    if isinstance(value, (Mapping, BaseModel)):
        return value
    return None


def to_sub_block(value: Any) -> Any:
    """Required nested block: anything that is not a mapping becomes empty."""
    block = to_block(value)
    return {} if block is None else block


def to_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


Number = Annotated[float, BeforeValidator(to_number)]
Flag = Annotated[bool, BeforeValidator(to_flag)]
Count = Annotated[int, BeforeValidator(to_count)]
OptionalNumber = Annotated[Optional[float], BeforeValidator(to_optional_number)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(to_timestamp)]
Text = Annotated[str, BeforeValidator(to_text)]
TextList = Annotated[list[str], BeforeValidator(to_text_list)]
ScoreMap = Annotated[dict[str, float], BeforeValidator(to_score_map)]
