import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from stripe_field import settings
from stripe_field.auth import MANAGE_OPTIONS, Caller, require_capability
from stripe_field.credentials import KeyFilter, ResolvedSecret, sanitize_text, secret_key_for
from stripe_field.db import get_db
from stripe_field.dependencies import get_secret, get_secret_key_filter
from stripe_field.fields import SETTINGS_MENU_HINT
from stripe_field.repositories import update_option

log = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsWrite(BaseModel):
    secret_key: str = ""


def _status(secret: ResolvedSecret) -> Dict[str, Any]:
    return {
        "connected": secret.connected,
        "source": secret.source,
        "secret_key_hint": secret.hint(),
        "menu_hint": SETTINGS_MENU_HINT,
    }


@router.get("")
def read_settings(
    caller: Caller = Depends(require_capability(MANAGE_OPTIONS)),
    secret: ResolvedSecret = Depends(get_secret),
) -> Dict[str, Any]:
    """Connection status. The key itself is never returned, only a masked hint."""
    return _status(secret)


@router.put("")
def write_settings(
    body: SettingsWrite,
    caller: Caller = Depends(require_capability(MANAGE_OPTIONS)),
    key_filter: Optional[KeyFilter] = Depends(get_secret_key_filter),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Save (or clear, with an empty string) the stored secret key."""
    value = sanitize_text(body.secret_key)
    update_option(db, settings.SECRET_KEY_OPTION, value)
    db.commit()
    log.info("stripe secret key option %s", "updated" if value else "cleared")
    return _status(secret_key_for(db, key_filter))
