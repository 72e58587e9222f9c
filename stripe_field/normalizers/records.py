from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .base import Normalizer
from .kinds import KindSpec, get_kind
from .labels import as_amount, resolve_plan_label
from .types import BareIdentifier, Empty, ObjectKind, PlanLabeler, Record, classify_value

_CENTS = Decimal("0.01")


class RecordNormalizer(Normalizer):
    """
    Turns whatever a field holds (stored record, cached widget data, Stripe
    payload, legacy bare ID) into the canonical record for its kind.
    """
    def __init__(self, plan_labeler: Optional[PlanLabeler] = None):
        self.plan_labeler = plan_labeler

    def normalize_record(self, kind: ObjectKind, rec: Any) -> Record:
        return normalize(rec, kind, plan_labeler=self.plan_labeler)


def normalize(raw: Any, kind: ObjectKind, plan_labeler: Optional[PlanLabeler] = None) -> Record:
    """
    Return a NEW canonical record; `raw` is never mutated.

    Every descriptive field of the kind is present, `label` is recomputed and
    is blank only when `id` is.
    """
    spec = get_kind(kind)
    shape = classify_value(raw)

    if isinstance(shape, Empty):
        return empty_record(spec)
    if isinstance(shape, BareIdentifier):
        rec = empty_record(spec)
        rec["id"] = shape.value
        rec["label"] = shape.value
        return rec

    data = shape.data
    rec = {"id": clean_text(data.get("id"))}
    extracted = spec.extract(data)
    for key, default in spec.defaults.items():
        rec[key] = _coerce(key, default, extracted.get(key))

    if spec.kind == "subscription":
        sync_customer_aliases(rec)
        if not rec["plan_label"]:
            rec["plan_label"] = resolve_plan_label(rec["plan"], plan_labeler)

    # the plan label, if any, is already on the record
    rec["label"] = label_for(rec, spec)
    return rec


def empty_record(spec: KindSpec) -> Record:
    rec: Record = {"id": "", "label": ""}
    rec.update(spec.defaults)
    return rec


def label_for(rec: Mapping[str, Any], spec: KindSpec, plan_labeler: Optional[PlanLabeler] = None) -> str:
    if not rec.get("id"):
        return ""
    if not has_descriptive_data(rec, spec):
        # ID-only records (bare legacy IDs included) are labelled with the ID
        # rather than a kind placeholder, so normalizing twice changes nothing
        return rec["id"]
    return spec.label(rec, plan_labeler)


def has_descriptive_data(rec: Mapping[str, Any], spec: KindSpec) -> bool:
    """True if any descriptive field holds something beyond its empty default."""
    return any(rec.get(k) not in (None, "", False) for k in spec.descriptive_fields)


def sync_customer_aliases(rec: Record) -> None:
    """Keep name/email and customer_name/customer_email mirrored on subscriptions."""
    for alias, canonical in (("name", "customer_name"), ("email", "customer_email")):
        value = rec[canonical] or rec[alias]  # canonical side wins
        rec[canonical] = rec[alias] = value


# --- Field helpers ---

def clean_text(value: Any) -> str:
    """None → "", everything else → trimmed str."""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def as_bool(value: Any) -> bool:
    """Convert JSON/form booleans ("1", "true", "yes", 1, True) into a bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    t = str(value).strip().lower()
    return t in {"true", "yes", "y", "1", "on"}


def format_amount(value: Any) -> str:
    """Two-decimal string for a price amount, "" when unknown."""
    amount = as_amount(value)
    if amount is None:
        return ""
    try:
        return str(amount.quantize(_CENTS))
    except InvalidOperation:
        return ""


def _coerce(key: str, default: Any, value: Any) -> Any:
    if key == "active":
        return as_bool(value)
    if key == "price_amount":
        return format_amount(value)
    if value is None:
        return default
    return clean_text(value)
