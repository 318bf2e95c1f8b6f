"""
Input validators and normalizers.

Responsibilities:
- Generic text sanitation (strip controls, collapse whitespace)
- JSON schema validation of request payloads (jsonschema)
- ValidationError raised to routes (mapped to HTTP 400)

Error codes (ValidationError.code):
- missing_fields: required key absent, null or blank
- invalid_value:  wrong JSON type or value outside the allowed set
- invalid_date:   date string that does not parse
- date_range:     endDate before startDate

Connects:
- service/offer_prompt.py (OfferRequest.from_payload)
- service/ad_generator.py (AdRequest.from_payload)
- app/__init__.py (error handler)
"""

from __future__ import annotations
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import jsonschema

_CONTROLS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE = re.compile(r"\s+")

DEFAULT_MAX_LEN = 2000

MISSING_FIELDS = "missing_fields"
INVALID_VALUE = "invalid_value"
INVALID_DATE = "invalid_date"
DATE_RANGE = "date_range"


class ValidationError(Exception):
    """Raised when a request payload is missing fields or carries bad values."""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None, *, code: str = INVALID_VALUE):
        super().__init__(message)
        self.message = message
        self.fields: List[str] = list(fields or [])
        self.code = code


def sanitize_text(s: Optional[str], *, max_len: int = DEFAULT_MAX_LEN) -> str:
    s = (s or "").replace("\x00", "")
    s = _CONTROLS.sub(" ", s)
    s = _WHITESPACE.sub(" ", s).strip()
    return s[:max_len]


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


# --- Schema validation ---

def validate_json(data: Any, *, schema: Dict[str, Any]) -> None:
    """
    Validate a request body against a JSON schema.

    Raises ValidationError naming every offending top-level field, in the
    schema's property order. Absent, null or blank required fields are
    reported as missing_fields; any other violation as invalid_value.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Payload must be a JSON object", code=INVALID_VALUE)

    errors = list(jsonschema.Draft7Validator(schema).iter_errors(data))
    if not errors:
        return

    required = set(schema.get("required", ()))
    missing, invalid = set(), set()
    for err in errors:
        if err.validator == "required":
            missing.update(n for n in err.validator_value if n not in data)
        elif err.path:
            name = str(err.path[0])
            if name in required and is_blank(data.get(name)):
                missing.add(name)
            else:
                invalid.add(name)
        else:
            invalid.add("")

    order = list(schema.get("properties", {}))

    def _ordered(names):
        return sorted((n for n in names if n), key=lambda n: order.index(n) if n in order else len(order))

    if missing:
        fields = _ordered(missing)
        raise ValidationError(f"Missing required fields: {', '.join(fields)}", fields, code=MISSING_FIELDS)
    fields = _ordered(invalid)
    raise ValidationError(f"Invalid values for: {', '.join(fields) or 'payload'}", fields, code=INVALID_VALUE)
