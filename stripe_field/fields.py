from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from stripe_field.codec import decode
from stripe_field.normalizers import ObjectKind, get_kind
from stripe_field.normalizers.records import has_descriptive_data

SETTINGS_MENU_HINT = "Settings → Stripe Field"


class FieldSettings(BaseModel):
    """Per-field options an editor sets on the form builder."""
    kind: ObjectKind
    return_format: Literal["id", "object"] = "id"
    placeholder: str = ""
    allow_null: bool = False


def default_placeholder(kind: ObjectKind) -> str:
    return f"Select a Stripe {get_kind(kind).display_name.lower()}"


def hidden_data(record: Dict[str, Any], kind: ObjectKind) -> Optional[Dict[str, Any]]:
    """
    Cached display data the widget posts back with the selection, so saving
    doesn't need a Stripe round trip. None when there is nothing worth caching.
    """
    spec = get_kind(kind)
    if not has_descriptive_data(record, spec):
        return None
    data = {"id": record["id"], "label": record["label"]}
    data.update({k: record[k] for k in spec.descriptive_fields})
    return data


def render_state(stored: Any, field: FieldSettings, connected: bool) -> Dict[str, Any]:
    """Everything the dropdown needs to draw the current selection."""
    spec = get_kind(field.kind)
    record = decode(stored, field.kind)
    notice = None
    if not connected:
        notice = (
            f"Connect your Stripe account from {SETTINGS_MENU_HINT} "
            f"to load {spec.display_name.lower()}s."
        )
    return {
        "object_type": spec.kind,
        "id": record["id"],
        "label": record["label"] or record["id"],
        "placeholder": field.placeholder or default_placeholder(field.kind),
        "allow_null": field.allow_null,
        "connected": connected,
        "disabled": not connected,
        "notice": notice,
        "data": hidden_data(record, field.kind),
    }
