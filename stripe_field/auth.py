"""
Caller identity, capabilities and request nonces.

Tokens come from configuration: editor tokens can edit posts (and therefore
search Stripe), admin tokens can also manage the plugin settings.
"""
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from fastapi import Depends, HTTPException, Request

from stripe_field import settings

log = logging.getLogger(__name__)

EDIT_POSTS = "edit_posts"
MANAGE_OPTIONS = "manage_options"


@dataclass(frozen=True)
class Caller:
    token: str
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def _bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def caller_for_token(token: Optional[str]) -> Optional[Caller]:
    if not token:
        return None
    if token in settings.ADMIN_TOKENS:
        return Caller(token, frozenset({EDIT_POSTS, MANAGE_OPTIONS}))
    if token in settings.EDITOR_TOKENS:
        return Caller(token, frozenset({EDIT_POSTS}))
    return None


def get_caller(request: Request) -> Caller:
    caller = caller_for_token(_bearer_token(request))
    if caller is None:
        raise HTTPException(401, {"code": "unauthorized", "message": "Authentication required."})
    return caller


def require_capability(capability: str):
    """Dependency factory: the caller must hold `capability`."""
    def _check(caller: Caller = Depends(get_caller)) -> Caller:
        if not caller.can(capability):
            log.debug("permission check failed: capability=%s", capability)
            raise HTTPException(
                403, {"code": "unauthorized", "message": "You do not have permission to perform this request."}
            )
        return caller
    return _check


# -------------------------------------------------------------------
# Nonces
# -------------------------------------------------------------------
def search_action(kind: str) -> str:
    return f"acf_stripe_{kind}_search"


def _tick(now: Optional[float] = None) -> int:
    now = time.time() if now is None else now
    return int(now // (settings.NONCE_LIFETIME / 2))


def _nonce_for(action: str, caller: Caller, tick: int) -> str:
    msg = f"{tick}|{action}|{caller.token}".encode()
    return hmac.new(settings.NONCE_SECRET.encode(), msg, hashlib.sha256).hexdigest()[:10]


def create_nonce(action: str, caller: Caller, now: Optional[float] = None) -> str:
    return _nonce_for(action, caller, _tick(now))


def verify_nonce(nonce: Optional[str], action: str, caller: Caller, now: Optional[float] = None) -> bool:
    """Valid for the current and the previous half-lifetime tick."""
    if not nonce:
        return False
    tick = _tick(now)
    return any(hmac.compare_digest(nonce, _nonce_for(action, caller, t)) for t in (tick, tick - 1))
