from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from stripe_field.auth import EDIT_POSTS, Caller, require_capability
from stripe_field.codec import encode, format_value
from stripe_field.credentials import ResolvedSecret
from stripe_field.db import get_db
from stripe_field.dependencies import get_lookup, get_secret
from stripe_field.fields import FieldSettings, render_state
from stripe_field.lookup import RemoteLookup
from stripe_field.normalizers import ObjectKind
from stripe_field.repositories import load_field_value, save_field_value

from .search import KIND_PATTERN

router = APIRouter(prefix="/objects/{object_id}/fields", tags=["fields"])


# Request schema: the submitted form value plus the widget's cached item
class FieldWrite(BaseModel):
    kind: ObjectKind
    value: Optional[str] = ""                        # bare Stripe ID from the select
    data: Union[Dict[str, Any], str, None] = None    # cached item (dict or JSON text)


@router.put("/{field_name}")
def save_field(
    body: FieldWrite,
    object_id: str = Path(...),
    field_name: str = Path(...),
    caller: Caller = Depends(require_capability(EDIT_POSTS)),
    lookup: RemoteLookup = Depends(get_lookup),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Save a selection. Always succeeds once authorized: Stripe failures only
    mean the stored record carries the ID without display data.
    """
    record = encode(body.value, body.data, body.kind, lookup)
    try:
        save_field_value(db, object_id, field_name, body.kind, record)
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(500, f"Save failed: {e}")
    return {
        "ok": True,
        "object_id": object_id,
        "field_name": field_name,
        "kind": body.kind,
        "value": record if record["id"] else None,
    }


@router.get("/{field_name}")
def get_field(
    object_id: str = Path(...),
    field_name: str = Path(...),
    kind: Optional[str] = Query(None, pattern=KIND_PATTERN, description="Defaults to the stored kind"),
    return_format: str = Query("id", pattern="^(id|object)$"),
    lookup: RemoteLookup = Depends(get_lookup),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Formatted field value, as a template would receive it."""
    row = load_field_value(db, object_id, field_name)
    if row is None:
        raise HTTPException(404, "Field value not found")
    kind = kind or row.kind
    return {
        "object_id": object_id,
        "field_name": field_name,
        "kind": kind,
        "return_format": return_format,
        "value": format_value(row.value, kind, return_format, lookup),
    }


@router.get("/{field_name}/state")
def field_state(
    object_id: str = Path(...),
    field_name: str = Path(...),
    kind: str = Query(..., pattern=KIND_PATTERN),
    placeholder: str = Query(""),
    allow_null: bool = Query(False),
    caller: Caller = Depends(require_capability(EDIT_POSTS)),
    secret: ResolvedSecret = Depends(get_secret),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """What the editor's dropdown should show for the stored value."""
    row = load_field_value(db, object_id, field_name)
    field = FieldSettings(kind=kind, placeholder=placeholder, allow_null=allow_null)
    return render_state(row.value if row else None, field, secret.connected)
