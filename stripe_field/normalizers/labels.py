# stripe_field/normalizers/labels.py
"""
Display labels for canonical records.

Every function here is total: any record (even an empty dict) produces a string.
Output depends only on the record contents, plus the plan labeler for
subscriptions.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .types import PlanLabeler

UNKNOWN_CUSTOMER = "Unknown customer"
UNKNOWN_PRODUCT = "Unknown product"
SUBSCRIPTION_PLACEHOLDER = "Stripe subscription"
SEPARATOR = " – "
INACTIVE_MARKER = " (inactive)"


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()


def as_amount(value: Any) -> Optional[Decimal]:
    """Parse a price amount; None when it isn't a finite number."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def format_price(amount: Any, currency: Any = "", interval: Any = "") -> str:
    """`USD10.00/month`, `EUR1,250.00` for one-off prices, `""` when no amount."""
    parsed = as_amount(amount)
    if parsed is None:
        return ""
    out = f"{_text(currency).upper()}{parsed:,.2f}"
    interval = _text(interval)
    if interval:
        out += f"/{interval}"
    return out


def customer_display(name: Any, email: Any, customer_id: Any = "") -> str:
    """Name and email if both known, else whichever is, else the customer ID."""
    name, email = _text(name), _text(email)
    if name and email:
        return f"{name} ({email})"
    return name or email or _text(customer_id)


def customer_label(record: Mapping[str, Any]) -> str:
    return customer_display(record.get("name"), record.get("email"), record.get("id")) or UNKNOWN_CUSTOMER


def product_label(record: Mapping[str, Any]) -> str:
    name = _text(record.get("name"))
    price = format_price(record.get("price_amount"), record.get("price_currency"), record.get("price_interval"))
    label = SEPARATOR.join(p for p in (name, price) if p)
    if not label:
        return _text(record.get("id"))
    if not record.get("active"):
        label += INACTIVE_MARKER
    return label


def resolve_plan_label(plan: Any, plan_labeler: Optional[PlanLabeler] = None) -> str:
    """Plan label from `plan_labeler`, or "" when there is none or it fails."""
    plan = _text(plan)
    if not plan or plan_labeler is None:
        return ""
    try:
        resolved = plan_labeler(plan)
    except Exception:
        # labelers wrap remote calls; a failure here must not break rendering
        resolved = None
    return _text(resolved)


def plan_display(plan: Any, plan_labeler: Optional[PlanLabeler] = None) -> str:
    """Resolve a plan ID through `plan_labeler`, degrading to the raw plan string."""
    return resolve_plan_label(plan, plan_labeler) or _text(plan)


def subscription_label(
    record: Mapping[str, Any],
    plan_labeler: Optional[PlanLabeler] = None,
    with_meta: bool = False,
) -> str:
    """
    "{plan} – {customer}" or whichever half is known, else a placeholder.

    A stored `plan_label` wins over `plan_labeler`, so saved records redisplay
    without a lookup. `with_meta` appends " [id | status]". It is off for stored
    and listed labels and kept for callers that want the long form.
    """
    plan = _text(record.get("plan_label")) or plan_display(record.get("plan"), plan_labeler)
    customer = customer_display(
        record.get("customer_name") or record.get("name"),
        record.get("customer_email") or record.get("email"),
        record.get("customer_id"),
    )
    label = SEPARATOR.join(p for p in (plan, customer) if p) or SUBSCRIPTION_PLACEHOLDER

    if with_meta:
        meta = [p for p in (_text(record.get("id")), _text(record.get("status"))) if p]
        if meta:
            label += " [" + " | ".join(meta) + "]"
    return label


def plan_label(product_name: Any, amount_cents: Any, currency: Any, interval: Any) -> str:
    """Label for a plan resolved remotely: `Pro USD10.00/month`."""
    name = _text(product_name) or UNKNOWN_PRODUCT
    cents = as_amount(amount_cents) or Decimal(0)
    return f"{name} {_text(currency).upper()}{cents / 100:,.2f}/{_text(interval)}"
