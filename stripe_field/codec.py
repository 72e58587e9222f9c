"""
Form value <-> stored value.

While editing, a field holds the bare Stripe ID. On save it is encoded into a
canonical record (so redisplay needs no API call); on load it is decoded back.
"""
import json
import logging
from typing import Any, Literal, Mapping, Optional, Union

from stripe_field.lookup import RemoteLookup
from stripe_field.normalizers import ObjectKind, PlanLabeler, Record, get_kind, normalize
from stripe_field.normalizers.records import has_descriptive_data

log = logging.getLogger(__name__)

ReturnFormat = Literal["id", "object"]


def is_valid_object_id(value: Any, kind: ObjectKind) -> bool:
    return get_kind(kind).is_valid_id(value)


def decode(stored: Any, kind: ObjectKind, plan_labeler: Optional[PlanLabeler] = None) -> Record:
    return normalize(stored, kind, plan_labeler)


def _parse_cache(client_cache: Union[Mapping[str, Any], str, None]) -> Optional[Mapping[str, Any]]:
    """Widget data comes as a dict or as the JSON text of a hidden input."""
    if isinstance(client_cache, Mapping):
        return client_cache
    if isinstance(client_cache, str) and client_cache.strip():
        try:
            decoded = json.loads(client_cache)
        except ValueError:
            log.debug("ignoring unparseable client cache")
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def encode(
    form_value: Optional[str],
    client_cache: Union[Mapping[str, Any], str, None],
    kind: ObjectKind,
    lookup: Optional[RemoteLookup] = None,
) -> Record:
    """
    Build the record to store for a submitted selection. Never raises.

    Order: cached widget data for the same ID, then a live fetch when Stripe is
    connected, then an ID-only record.
    """
    form_value = (form_value or "").strip() if isinstance(form_value, str) else ""
    if not form_value:
        return normalize(None, kind)

    if not is_valid_object_id(form_value, kind):
        log.debug("storing unrecognised %s value as opaque id: %r", kind, form_value)
        return normalize({"id": form_value}, kind)

    labeler = lookup.plan_labeler() if lookup is not None else None

    cache = _parse_cache(client_cache)
    if cache is not None and cache.get("id") == form_value:
        return normalize(cache, kind, labeler)

    if lookup is not None and lookup.is_connected():
        res = lookup.fetch(form_value, kind)
        if res.ok:
            return res.value
        log.warning(
            "stripe %s lookup failed on save, storing id only: id=%s error=%s",
            kind, form_value, res.error.message,
        )

    return normalize({"id": form_value}, kind)


def load_value(stored: Any, kind: ObjectKind) -> str:
    """The bare ID the form input should hold."""
    return decode(stored, kind)["id"]


def format_value(
    stored: Any,
    kind: ObjectKind,
    return_format: ReturnFormat = "id",
    lookup: Optional[RemoteLookup] = None,
) -> Union[str, Record, None]:
    """
    Value handed to templates.

    "id" returns the Stripe ID; "object" returns the stored record when it has
    display data, else a live record when connected, else None.
    """
    record = decode(stored, kind)
    if not record["id"]:
        return None
    if return_format != "object":
        return record["id"]

    if has_descriptive_data(record, get_kind(kind)):
        return record

    if lookup is not None and lookup.is_connected():
        res = lookup.fetch(record["id"], kind)
        if res.ok:
            return res.value
        log.warning("stripe %s lookup failed on format: id=%s error=%s", kind, record["id"], res.error.message)
    return None
