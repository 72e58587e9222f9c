# stripe_field/normalizers/types.py
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Union

ObjectKind = Literal["customer", "subscription", "product"]
Record = Dict[str, Any]

# Resolves a subscription plan identifier to a display label, or None when it can't.
PlanLabeler = Callable[[str], Optional[str]]


# ---------------------------------------------------------------------
# Shapes a stored or submitted field value can arrive in
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Empty:
    """Nothing selected."""


@dataclass(frozen=True)
class RawObject:
    """A mapping carrying an `id` (canonical record, cached widget data or API payload)."""
    data: Mapping[str, Any]


@dataclass(frozen=True)
class JsonText:
    """A JSON document that decoded to an object with an `id`."""
    data: Mapping[str, Any]


@dataclass(frozen=True)
class BareIdentifier:
    """Legacy storage: the Stripe ID on its own."""
    value: str


StoredShape = Union[Empty, RawObject, JsonText, BareIdentifier]


def classify_value(raw: Any) -> StoredShape:
    """Work out which shape `raw` is in. Never raises."""
    if isinstance(raw, Mapping):
        return RawObject(raw) if "id" in raw else Empty()
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return Empty()
        if text[0] == "{":
            try:
                decoded = json.loads(text)
            except ValueError:
                decoded = None
            if isinstance(decoded, dict) and "id" in decoded:
                return JsonText(decoded)
        return BareIdentifier(text)
    return Empty()
