# gaadiyaan/mapper.py
"""Conversion between the external (camelCase JSON) shape of a vehicle listing
and its storage row (snake_case columns, JSON text for structured values)."""
import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Mapping

from .exceptions import ValidationError
from .models import FUEL_TYPES, INT_MAX, INT_MIN, PRICE_MAX, TRANSMISSIONS
from .utils import logger

# external name -> column name
FIELD_MAP = {
    "id": "id",
    "dealerId": "dealer_id",
    "carTitle": "car_title",
    "price": "price",
    "year": "year",
    "description": "description",
    "make": "make",
    "model": "model",
    "registrationYear": "registration_year",
    "insurance": "insurance",
    "fuelType": "fuel_type",
    "seats": "seats",
    "kmsDriven": "kms_driven",
    "location": "location",
    "ownership": "ownership",
    "engineDisplacement": "engine_displacement",
    "transmission": "transmission",
    "specifications": "specifications",
    "features": "features",
    "images": "images",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
COLUMN_MAP = {column: name for name, column in FIELD_MAP.items()}

REQUIRED_FIELDS = (
    "carTitle", "price", "year", "make", "model", "registrationYear",
    "insurance", "fuelType", "seats", "kmsDriven", "location",
    "ownership", "engineDisplacement", "transmission",
)
INTEGER_FIELDS = ("year", "registrationYear", "seats", "kmsDriven", "engineDisplacement")
ENUM_FIELDS = {"fuelType": FUEL_TYPES, "transmission": TRANSMISSIONS}
TEXT_FIELDS = ("dealerId", "carTitle", "make", "model", "insurance", "location", "ownership")
STRUCTURED_FIELDS = ("specifications", "features", "images")
IMMUTABLE_FIELDS = ("id", "dealerId", "createdAt", "updatedAt")

_EMPTY_STRUCTURED = {"specifications": list, "features": dict, "images": list}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        number = int(value)
    else:
        text = str(value).strip()
        try:
            number = int(text)
        except ValueError:
            as_float = float(text)
            if not as_float.is_integer():
                raise
            number = int(as_float)
    if not INT_MIN <= number <= INT_MAX:
        raise ValueError(value)
    return number


def _parse_price(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(value)
    number = float(value)
    if number != number or not 0 <= number <= PRICE_MAX:
        raise ValueError(value)
    return number


def _encode_structured(name: str, value: Any):
    """JSON text for a non-empty structured value, None for an empty one."""
    if value is None or value == "":
        return None
    if name == "features":
        if not isinstance(value, Mapping):
            raise ValueError(value)
        return json.dumps(dict(value)) if value else None
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ValueError(value)
    return json.dumps(list(value)) if value else None


def decode_form_value(raw: Any, field: str):
    """Parse a structured field sent as JSON text in a multipart form."""
    if not isinstance(raw, str):
        return raw
    if raw.strip() == "":
        return None
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError(f"Invalid JSON for field: {field}", [field])


def _convert(fields: Mapping[str, Any], problems: Dict[str, list]) -> Dict[str, Any]:
    row = {}
    for name, value in fields.items():
        column = FIELD_MAP[name]
        if name in STRUCTURED_FIELDS:
            try:
                row[column] = _encode_structured(name, value)
            except ValueError:
                problems["invalid"].append(name)
            continue
        if name in REQUIRED_FIELDS or name == "dealerId":
            if _is_blank(value):
                problems["missing"].append(name)
                continue
        if name == "price":
            try:
                row[column] = _parse_price(value)
            except (TypeError, ValueError):
                problems["numeric"].append(name)
        elif name in INTEGER_FIELDS:
            try:
                row[column] = _parse_int(value)
            except (TypeError, ValueError):
                problems["numeric"].append(name)
        elif name in ENUM_FIELDS:
            normalized = str(value).strip().lower()
            if normalized not in ENUM_FIELDS[name]:
                problems["invalid"].append(name)
            else:
                row[column] = normalized
        elif name == "description":
            row[column] = None if _is_blank(value) else str(value)
        else:
            row[column] = str(value).strip()
    return row


def _raise_problems(problems: Dict[str, list]):
    messages = []
    if problems["missing"]:
        messages.append(f"Missing required fields: {', '.join(problems['missing'])}")
    if problems["numeric"]:
        messages.append(f"Invalid numeric values for fields: {', '.join(problems['numeric'])}")
    if problems["invalid"]:
        messages.append(f"Invalid values for fields: {', '.join(problems['invalid'])}")
    if problems["rejected"]:
        messages.append(f"Fields cannot be changed: {', '.join(problems['rejected'])}")
    if messages:
        fields = problems["missing"] + problems["numeric"] + problems["invalid"] + problems["rejected"]
        raise ValidationError("; ".join(messages), fields)


def _new_problems():
    return {"missing": [], "numeric": [], "invalid": [], "rejected": []}


def to_storage(external: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a complete listing and convert it to column values.

    Raises `ValidationError` naming every offending field.
    """
    problems = _new_problems()
    supplied = {k: v for k, v in external.items() if k in FIELD_MAP and k not in ("id", "createdAt", "updatedAt")}
    for name in ("dealerId",) + REQUIRED_FIELDS:
        if name not in supplied:
            problems["missing"].append(name)
    row = _convert(supplied, problems)
    _raise_problems(problems)
    for name in STRUCTURED_FIELDS:
        row.setdefault(FIELD_MAP[name], None)
    row.setdefault("description", None)
    return row


def to_storage_partial(external: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate and convert the fields of a partial update.

    Only supplied fields are returned; identity, dealer id and timestamps
    cannot be changed.
    """
    problems = _new_problems()
    supplied = {}
    for name, value in external.items():
        if name in IMMUTABLE_FIELDS or name not in FIELD_MAP:
            problems["rejected"].append(name)
        else:
            supplied[name] = value
    row = _convert(supplied, problems)
    _raise_problems(problems)
    if not row:
        raise ValidationError("No fields to update")
    return row


def _decode_structured(column: str, raw: Any, listing_id: Any):
    empty = _EMPTY_STRUCTURED[column]
    if raw is None or raw == "":
        return empty()
    value = raw
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Listing %s has malformed %s, returning empty", listing_id, column)
            return empty()
    if not isinstance(value, empty):
        logger.warning("Listing %s has malformed %s, returning empty", listing_id, column)
        return empty()
    return value


def from_storage(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a storage row to the external listing shape; never raises on a
    malformed structured column."""
    external = {}
    for column, value in row.items():
        name = COLUMN_MAP.get(column)
        if name is None:
            continue
        if column in _EMPTY_STRUCTURED:
            value = _decode_structured(column, value, row.get("id"))
        elif isinstance(value, Decimal):
            value = float(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        external[name] = value
    return external
