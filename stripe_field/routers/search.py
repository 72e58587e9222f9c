from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query

from stripe_field.auth import EDIT_POSTS, Caller, create_nonce, require_capability, search_action, verify_nonce
from stripe_field.credentials import ResolvedSecret
from stripe_field.dependencies import get_lookup, get_secret
from stripe_field.fields import SETTINGS_MENU_HINT
from stripe_field.lookup import FailureKind, LookupFailure, RemoteLookup
from stripe_field.normalizers import get_kind

# --------------------------------------------------------------------
# Router setup
# --------------------------------------------------------------------
router = APIRouter(prefix="", tags=["search"])

KIND_PATTERN = "^(customer|subscription|product)$"

_FAILURE_STATUS = {
    FailureKind.UNAUTHORIZED: 403,
    FailureKind.NOT_CONFIGURED: 400,
    FailureKind.MISSING_IDENTIFIER: 400,
    FailureKind.NOT_FOUND: 404,
    FailureKind.PROVIDER_ERROR: 500,
}


def raise_for_failure(error: LookupFailure):
    """Turn a lookup failure into an HTTP error the widget can tell apart."""
    raise HTTPException(_FAILURE_STATUS[error.kind], {"code": error.kind.value, "message": error.message})


@router.get("/nonce/{kind}")
def nonce(
    kind: str = Path(..., pattern=KIND_PATTERN),
    caller: Caller = Depends(require_capability(EDIT_POSTS)),
    secret: ResolvedSecret = Depends(get_secret),
) -> Dict[str, Any]:
    """
    Bootstrap data for the dropdown: the search nonce plus UI strings.
    The widget fetches this once per page load.
    """
    plural = get_kind(kind).display_name.lower() + "s"
    action = search_action(kind)
    return {
        "action": action,
        "nonce": create_nonce(action, caller),
        "connected": secret.connected,
        "strings": {
            "searching": "Searching…",
            "noResults": f"No {plural} found",
            "error": f"Unable to load {plural}",
            "notConnected": f"Connect your Stripe account from {SETTINGS_MENU_HINT} to load {plural}.",
        },
    }


@router.get("/search/{kind}")
def search(
    kind: str = Path(..., pattern=KIND_PATTERN),
    search: str = Query("", max_length=500, description="Free text, or a Stripe ID of this kind"),
    nonce: Optional[str] = Query(None),
    x_field_nonce: Optional[str] = Header(None),
    caller: Caller = Depends(require_capability(EDIT_POSTS)),
    lookup: RemoteLookup = Depends(get_lookup),
) -> Dict[str, Any]:
    """
    Search Stripe objects for the dropdown.

    Response JSON:
      {"items": [{"id": "cus_…", "text": "Ann Lee (ann@x.com)", ...}], "more": false}

    Errors carry {"code", "message"} in `detail`: unauthorized (401/403),
    not_configured (400), missing_identifier (400), not_found (404),
    provider_error (500).
    """
    if not verify_nonce(x_field_nonce or nonce, search_action(kind), caller):
        raise HTTPException(403, {"code": "unauthorized", "message": "Security check failed."})

    res = lookup.search(search, kind)
    if not res.ok:
        raise_for_failure(res.error)
    return {"items": res.value.items, "more": res.value.more}
