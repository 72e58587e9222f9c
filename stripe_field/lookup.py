"""
Remote lookups against Stripe.

`RemoteLookup` never raises for expected failures: a missing key, a blank
identifier and anything Stripe reports all come back as a failed
LookupResult so callers can pick how to surface them.
"""
import hashlib
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

import stripe

from stripe_field import settings
from stripe_field.normalizers import KindSpec, ObjectKind, PlanLabeler, Record, get_kind, normalize
from stripe_field.normalizers.labels import customer_display, plan_label
from stripe_field.stripe_client import build_client, error_message, is_not_found, resource

log = logging.getLogger(__name__)

T = TypeVar("T")
ClientFactory = Callable[[str], stripe.StripeClient]

# Only identifiers like these are sent to /v1/plans; nicknames stay as they are.
PLAN_ID_PATTERN = re.compile(r"^(plan|price)_[a-zA-Z0-9]+$")


class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    NOT_CONFIGURED = "not_configured"
    MISSING_IDENTIFIER = "missing_identifier"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"


@dataclass
class LookupFailure:
    kind: FailureKind
    message: str


@dataclass
class LookupResult(Generic[T]):
    """Container for the outcome of a lookup."""
    ok: bool
    value: Optional[T] = None
    error: Optional[LookupFailure] = None

    @classmethod
    def success(cls, value: T) -> "LookupResult[T]":
        return cls(True, value=value)

    @classmethod
    def failure(cls, kind: FailureKind, message: str) -> "LookupResult[T]":
        return cls(False, error=LookupFailure(kind, message))


@dataclass
class Page:
    items: List[Record] = field(default_factory=list)
    more: bool = False


# ---------------------------------------------------------------------
# Connection context
# ---------------------------------------------------------------------

class LookupContext:
    """
    Holds the Stripe clients for one inbound request.

    Clients are cached per credential, and plan labels per plan ID, for the
    lifetime of the context; build a new context per request and close it
    afterwards.
    """
    def __init__(self, secret_key: Optional[str], client_factory: ClientFactory = build_client):
        self.secret_key = (secret_key or "").strip()
        self._client_factory = client_factory
        self._clients: Dict[str, stripe.StripeClient] = {}
        self.plan_labels: Dict[str, "LookupResult[str]"] = {}

    @property
    def connected(self) -> bool:
        return bool(self.secret_key)

    def client(self) -> Optional[stripe.StripeClient]:
        if not self.secret_key:
            return None
        cache_key = hashlib.sha256(self.secret_key.encode()).hexdigest()
        if cache_key not in self._clients:
            self._clients[cache_key] = self._client_factory(self.secret_key)
        return self._clients[cache_key]

    def close(self):
        self._clients.clear()
        self.plan_labels.clear()


# ---------------------------------------------------------------------
# Search term helpers
# ---------------------------------------------------------------------

def sanitize_search_term(term: Optional[str]) -> str:
    """
    Keep letters, digits, @ . _ - and spaces; cap length; trim.
    Whitespace right after a stripped run goes with it ("Ann*; DROP" -> "AnnDROP").
    """
    term = re.sub(r"[^a-zA-Z0-9@._\-\s]+\s*", "", (term or "").strip())
    return term[: settings.SEARCH_TERM_MAX].strip()


def prepare_search_query(term: Optional[str], kind: ObjectKind) -> Optional[str]:
    """
    Stripe search query for a free-text term, or None for an unfiltered listing.
    IDs of the kind become an exact `id:` match.
    """
    spec = get_kind(kind)
    term = (term or "").strip()
    if not term:
        return None
    if spec.is_valid_id(term):
        return f"id:'{term}'"
    clean = sanitize_search_term(term)
    if not clean or spec.search_query is None:
        return None
    return spec.search_query(clean)


# ---------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------

def _provider_failure(e: stripe.StripeError) -> LookupResult:
    if is_not_found(e):
        return LookupResult.failure(FailureKind.NOT_FOUND, error_message(e))
    return LookupResult.failure(FailureKind.PROVIDER_ERROR, error_message(e))


def _not_configured() -> LookupResult:
    return LookupResult.failure(FailureKind.NOT_CONFIGURED, "Stripe secret key is missing.")


class RemoteLookup:
    def __init__(self, context: LookupContext, resolve_plans: bool = True):
        self.context = context
        self.resolve_plans = resolve_plans

    def is_connected(self) -> bool:
        return self.context.connected

    def plan_labeler(self) -> Optional[PlanLabeler]:
        """Label resolver for subscription plans, or None when plans aren't resolved."""
        if not (self.resolve_plans and self.is_connected()):
            return None

        def _label(plan_id: str) -> Optional[str]:
            if not PLAN_ID_PATTERN.match(plan_id):
                return None
            res = self.plan_label(plan_id)
            if not res.ok:
                log.debug("plan label fallback for %s: %s", plan_id, res.error.message)
                return None
            return res.value

        return _label

    def fetch(self, object_id: Optional[str], kind: ObjectKind) -> LookupResult[Record]:
        spec = get_kind(kind)
        client = self.context.client()
        if client is None:
            return _not_configured()

        object_id = (object_id or "").strip()
        if not object_id:
            return LookupResult.failure(
                FailureKind.MISSING_IDENTIFIER, f"{spec.display_name} ID is required."
            )

        try:
            raw = resource(client, spec.resource).retrieve(object_id, expand=spec.fetch_expand)
        except stripe.StripeError as e:
            log.warning("stripe %s fetch failed: id=%s error=%s", kind, object_id, error_message(e))
            return _provider_failure(e)
        return LookupResult.success(normalize(raw, kind, self.plan_labeler()))

    def search(self, term: Optional[str], kind: ObjectKind) -> LookupResult[Page]:
        spec = get_kind(kind)
        client = self.context.client()
        if client is None:
            return _not_configured()

        term = (term or "").strip()
        if term and spec.is_valid_id(term):
            log.debug("stripe %s search: exact id %s", kind, term)
            res = self.fetch(term, kind)
            if not res.ok:
                return LookupResult(False, error=res.error)
            return LookupResult.success(Page(items=[to_item(res.value, spec)], more=False))

        query = prepare_search_query(term, kind)
        collection_api = resource(client, spec.resource)
        try:
            if query:
                log.debug("stripe %s search: query=%s", kind, query)
                collection = collection_api.search(query, limit=settings.PAGE_SIZE, expand=spec.list_expand)
            else:
                collection = collection_api.list(limit=settings.PAGE_SIZE, expand=spec.list_expand)
        except stripe.StripeError as e:
            log.warning("stripe %s search failed: term=%r error=%s", kind, term, error_message(e))
            return _provider_failure(e)

        records = [normalize(raw, kind) for raw in _collection_data(collection)]

        clean = sanitize_search_term(term)
        if not query and clean and spec.local_match is not None:
            records = [r for r in records if spec.local_match(r, clean)]

        # plan labels only for rows that survived the filter
        labeler = self.plan_labeler()
        if labeler is not None:
            records = [normalize(r, kind, labeler) for r in records]

        items = [to_item(r, spec) for r in records if r["id"]]
        return LookupResult.success(Page(items=items, more=bool(collection.get("has_more"))))

    def plan_label(self, plan_id: Optional[str]) -> LookupResult[str]:
        """`{product} {CUR}{amount}/{interval}` for a plan, via two retrieves."""
        client = self.context.client()
        if client is None:
            return _not_configured()
        plan_id = (plan_id or "").strip()
        if not plan_id:
            return LookupResult.failure(FailureKind.MISSING_IDENTIFIER, "Plan ID is required.")
        if not PLAN_ID_PATTERN.match(plan_id):
            return LookupResult.failure(FailureKind.MISSING_IDENTIFIER, f"Not a plan or price ID: {plan_id!r}")

        if plan_id not in self.context.plan_labels:
            self.context.plan_labels[plan_id] = self._resolve_plan_label(client, plan_id)
        return self.context.plan_labels[plan_id]

    def _resolve_plan_label(self, client: stripe.StripeClient, plan_id: str) -> LookupResult[str]:
        try:
            plan = resource(client, "plans").retrieve(plan_id)
        except stripe.StripeError as e:
            return _provider_failure(e)

        product_id = plan.get("product")
        if isinstance(product_id, dict):
            product_id = product_id.get("id")
        if not product_id:
            return LookupResult.failure(FailureKind.PROVIDER_ERROR, "Product id is missing from the plan object.")

        try:
            product = resource(client, "products").retrieve(product_id)
        except stripe.StripeError as e:
            return _provider_failure(e)

        return LookupResult.success(
            plan_label(product.get("name"), plan.get("amount"), plan.get("currency"), plan.get("interval"))
        )


def _collection_data(collection: Any) -> List[Dict[str, Any]]:
    data = collection.get("data") if isinstance(collection, dict) else None
    return [d for d in (data or []) if isinstance(d, dict)]


def to_item(record: Record, spec: KindSpec) -> Record:
    """Search result item: id, text, and the kind's display fields."""
    item = {"id": record["id"], "text": record["label"]}
    for f in spec.item_fields:
        item[f] = record.get(f, "")
    if spec.kind == "subscription":
        item["customer_display"] = customer_display(
            record["customer_name"], record["customer_email"], record["customer_id"]
        )
    return item
