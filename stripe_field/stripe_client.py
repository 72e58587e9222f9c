"""
Stripe SDK wiring.

Builds `stripe.StripeClient` instances and wraps the few v1 collections the
field reads (customers, subscriptions, products, plans) so callers get plain
dicts back, the shape the normalizers work with. SDK errors
(`stripe.StripeError` and subclasses) propagate; the lookup layer turns them
into failures.
"""
import logging
from typing import Any, Dict, Iterable, Optional

import stripe

from stripe_field import settings

log = logging.getLogger(__name__)


def build_client(api_key: str, http_client: Optional[stripe.HTTPClient] = None) -> stripe.StripeClient:
    """One SDK client per secret key; requests is the transport unless one is given."""
    if not api_key:
        raise ValueError("Stripe API key is required")
    return stripe.StripeClient(
        api_key,
        stripe_version=settings.STRIPE_API_VERSION,
        base_addresses={"api": settings.STRIPE_API_BASE},
        max_network_retries=0,
        http_client=http_client or stripe.RequestsClient(timeout=settings.STRIPE_TIMEOUT),
    )


def expand_params(expand: Optional[Iterable[str]] = None, **params: Any) -> Dict[str, Any]:
    expand = list(expand or [])
    if expand:
        params["expand"] = expand
    return params


def as_dict(obj: Any) -> Dict[str, Any]:
    return obj.to_dict()


class StripeResource:
    """One v1 collection, e.g. client.v1.customers."""
    def __init__(self, client: stripe.StripeClient, name: str):
        service = getattr(client.v1, name, None)
        if service is None:
            raise ValueError(f"Unknown Stripe resource: {name!r}")
        self.name = name
        self._service = service

    def retrieve(self, object_id: str, expand: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        log.debug("stripe retrieve %s/%s", self.name, object_id)
        return as_dict(self._service.retrieve(object_id, params=expand_params(expand)))

    def list(self, limit: int = settings.PAGE_SIZE, expand: Optional[Iterable[str]] = None, **filters: Any) -> Dict[str, Any]:
        log.debug("stripe list %s", self.name)
        return as_dict(self._service.list(params=expand_params(expand, limit=limit, **filters)))

    def search(self, query: str, limit: int = settings.PAGE_SIZE, expand: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        log.debug("stripe search %s: %s", self.name, query)
        return as_dict(self._service.search(params=expand_params(expand, query=query, limit=limit)))


def resource(client: stripe.StripeClient, name: str) -> StripeResource:
    return StripeResource(client, name)


def is_not_found(e: stripe.StripeError) -> bool:
    return isinstance(e, stripe.InvalidRequestError) and (e.http_status == 404 or e.code == "resource_missing")


def error_message(e: stripe.StripeError) -> str:
    return e.user_message or str(e) or f"Stripe returned HTTP {e.http_status}"
