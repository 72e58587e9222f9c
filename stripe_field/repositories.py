import json
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, StatementError
from sqlalchemy.orm import Session

from stripe_field.models import FieldValue, Option

log = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Options
# -------------------------------------------------------------------
def get_option(db: Session, key: str) -> Optional[str]:
    row = db.get(Option, key)
    return row.value if row is not None else None


def update_option(db: Session, key: str, value: Optional[str]) -> None:
    """Insert or overwrite a single option. Caller commits."""
    row = db.get(Option, key) or Option(key=key)
    row.value = value
    db.merge(row)


# -------------------------------------------------------------------
# Field values
# -------------------------------------------------------------------
def load_field_value(db: Session, object_id: str, field_name: str) -> Optional[FieldValue]:
    return db.get(FieldValue, (object_id, field_name))


def save_field_value(db: Session, object_id: str, field_name: str, kind: str, value: Any) -> FieldValue:
    """
    Overwrite the stored value wholesale (last write wins).
    Dicts are written as JSON text; strings verbatim; empty selections as "".
    """
    if isinstance(value, dict):
        stored = json.dumps(value, ensure_ascii=False, sort_keys=True) if value.get("id") else ""
    else:
        stored = value or ""

    try:
        with db.begin_nested():  # savepoint so a failed write leaves the session usable
            row = db.get(FieldValue, (object_id, field_name))
            if row is None:
                row = FieldValue(object_id=object_id, field_name=field_name)
            row.kind = kind
            row.value = stored
            row = db.merge(row)
    except (IntegrityError, StatementError):
        log.exception("field save failed: object_id=%s field=%s", object_id, field_name)
        raise
    return row
