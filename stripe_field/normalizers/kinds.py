# stripe_field/normalizers/kinds.py
"""
Per-kind behaviour table.

Customers, subscriptions and products share one normalizer, one codec and one
lookup adapter; everything that differs between them lives in a KindSpec.
"""
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from . import labels
from .types import ObjectKind, PlanLabeler, Record


@dataclass(frozen=True)
class KindSpec:
    kind: ObjectKind
    display_name: str
    prefix: str
    resource: str                                # Stripe API collection, e.g. "customers"
    defaults: Mapping[str, Any]                  # descriptive fields and their empty values
    extract: Callable[[Mapping[str, Any]], Record]
    label: Callable[[Mapping[str, Any], Optional[PlanLabeler]], str]
    item_fields: Tuple[str, ...]                 # extra fields on a search result item
    search_query: Optional[Callable[[str], str]] = None
    local_match: Optional[Callable[[Mapping[str, Any], str], bool]] = None
    list_expand: Tuple[str, ...] = ()
    fetch_expand: Tuple[str, ...] = ()
    id_pattern: "re.Pattern[str]" = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "id_pattern", re.compile(rf"^{re.escape(self.prefix)}[a-zA-Z0-9]+$"))

    def is_valid_id(self, value: Any) -> bool:
        return isinstance(value, str) and self.id_pattern.match(value) is not None

    @property
    def descriptive_fields(self) -> Tuple[str, ...]:
        return tuple(self.defaults)


# ---------------------------------------------------------------------
# Extractors: canonical fields from cached records or Stripe payloads
# ---------------------------------------------------------------------

def _first(*values: Any) -> Any:
    """First value that isn't None/empty."""
    for v in values:
        if v not in (None, ""):
            return v
    return None


def _get(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists; None if any hop is missing."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, Mapping):
            return None
        data = data[key] if isinstance(key, int) else data.get(key)
    return data


def extract_customer(data: Mapping[str, Any]) -> Record:
    return {"name": data.get("name"), "email": data.get("email")}


def extract_product(data: Mapping[str, Any]) -> Record:
    out = {k: data.get(k) for k in PRODUCT_DEFAULTS}
    default_price = data.get("default_price")
    if labels.as_amount(out["price_amount"]) is None and isinstance(default_price, Mapping):
        unit_amount = labels.as_amount(default_price.get("unit_amount"))
        if unit_amount is not None:
            out["price_amount"] = unit_amount / Decimal(100)
        out["price_currency"] = _first(default_price.get("currency"), out["price_currency"])
        out["price_interval"] = _first(_get(default_price, "recurring", "interval"), out["price_interval"])
    return out


def subscription_plan_name(data: Mapping[str, Any]) -> str:
    """Plan nickname or ID, looking at the legacy `plan` then the first item."""
    item = _get(data, "items", "data", 0)
    return _first(
        _get(data, "plan", "nickname"),
        _get(data, "plan", "id"),
        _get(item, "plan", "nickname"),
        _get(item, "plan", "id"),
        _get(item, "price", "nickname"),
        _get(item, "price", "id"),
    ) or ""


def extract_subscription(data: Mapping[str, Any]) -> Record:
    plan = data.get("plan")
    if not isinstance(plan, str):
        plan = subscription_plan_name(data)

    customer = data.get("customer")
    customer_id = data.get("customer_id")
    customer_name = data.get("customer_name")
    customer_email = data.get("customer_email")
    if isinstance(customer, Mapping):
        customer_id = _first(customer_id, customer.get("id"))
        customer_name = _first(customer_name, customer.get("name"))
        customer_email = _first(customer_email, customer.get("email"))
    elif isinstance(customer, str):
        customer_id = _first(customer_id, customer)

    return {
        "plan": plan,
        "plan_label": data.get("plan_label"),
        "status": data.get("status"),
        "customer_id": customer_id,
        "customer_name": customer_name,
        "customer_email": customer_email,
        "name": data.get("name"),
        "email": data.get("email"),
    }


# ---------------------------------------------------------------------
# Search helpers
# ---------------------------------------------------------------------

def _starts_with(value: Any, term: str) -> bool:
    return isinstance(value, str) and value.lower().startswith(term.lower())


def match_subscription(item: Mapping[str, Any], term: str) -> bool:
    """Stripe can't search subscriptions by customer, so listed pages are filtered locally."""
    return any(_starts_with(item.get(f), term) for f in ("customer_name", "customer_email", "plan"))


# ---------------------------------------------------------------------
# The table
# ---------------------------------------------------------------------

CUSTOMER_DEFAULTS = {"name": "", "email": ""}
PRODUCT_DEFAULTS = {
    "name": "",
    "description": "",
    "active": False,
    "price_amount": "",
    "price_currency": "",
    "price_interval": "",
}
SUBSCRIPTION_DEFAULTS = {
    "plan": "",
    "plan_label": "",
    "status": "",
    "customer_id": "",
    "customer_name": "",
    "customer_email": "",
    "name": "",
    "email": "",
}

KINDS: Dict[str, KindSpec] = {
    "customer": KindSpec(
        kind="customer",
        display_name="Customer",
        prefix="cus_",
        resource="customers",
        defaults=CUSTOMER_DEFAULTS,
        extract=extract_customer,
        label=lambda rec, _labeler=None: labels.customer_label(rec),
        item_fields=("name", "email"),
        search_query=lambda t: f"name:'{t}*' OR email:'{t}*'",
    ),
    "subscription": KindSpec(
        kind="subscription",
        display_name="Subscription",
        prefix="sub_",
        resource="subscriptions",
        defaults=SUBSCRIPTION_DEFAULTS,
        extract=extract_subscription,
        label=lambda rec, labeler=None: labels.subscription_label(rec, labeler),
        item_fields=("label", "plan", "plan_label", "status", "customer_id", "customer_name", "customer_email", "name", "email"),
        local_match=match_subscription,
        list_expand=("data.customer", "data.items.data.plan", "data.items.data.price"),
        fetch_expand=("customer", "items.data.plan", "items.data.price"),
    ),
    "product": KindSpec(
        kind="product",
        display_name="Product",
        prefix="prod_",
        resource="products",
        defaults=PRODUCT_DEFAULTS,
        extract=extract_product,
        label=lambda rec, _labeler=None: labels.product_label(rec),
        item_fields=("label", "name", "description", "active", "price_amount", "price_currency", "price_interval"),
        search_query=lambda t: f"name~'{t}' OR description~'{t}'",
        list_expand=("data.default_price",),
        fetch_expand=("default_price",),
    ),
}


def get_kind(kind: str) -> KindSpec:
    """Look up a kind; unknown kinds raise ValueError."""
    try:
        return KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown Stripe object kind: {kind!r}") from None


def build_label(record: Mapping[str, Any], kind: ObjectKind, plan_labeler: Optional[PlanLabeler] = None) -> str:
    return get_kind(kind).label(record, plan_labeler)
