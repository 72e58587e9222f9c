"""
Request-scoped dependencies shared by the routers.

Hosts can override `get_secret_key_filter` and `get_client_factory` through
`app.dependency_overrides` (tests do the same).
"""
from typing import Iterator, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from stripe_field import settings
from stripe_field.credentials import KeyFilter, ResolvedSecret, secret_key_for
from stripe_field.db import get_db
from stripe_field.lookup import ClientFactory, LookupContext, RemoteLookup
from stripe_field.stripe_client import build_client


def get_secret_key_filter() -> Optional[KeyFilter]:
    return None


def get_client_factory() -> ClientFactory:
    return build_client


def get_secret(
    db: Session = Depends(get_db),
    key_filter: Optional[KeyFilter] = Depends(get_secret_key_filter),
) -> ResolvedSecret:
    return secret_key_for(db, key_filter)


def get_lookup(
    secret: ResolvedSecret = Depends(get_secret),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> Iterator[RemoteLookup]:
    """One lookup context per request; its clients and plan labels are dropped afterwards."""
    ctx = LookupContext(secret.value, client_factory)
    try:
        yield RemoteLookup(ctx, resolve_plans=settings.RESOLVE_PLAN_LABELS)
    finally:
        ctx.close()
