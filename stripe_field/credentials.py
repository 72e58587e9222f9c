"""
Where the Stripe secret key comes from.

Precedence:
  1. the stored option (acf_stripe_secret_key, saved from the settings endpoint)
  2. the ACF_STRIPE_SECRET_KEY constant from the environment
  3. an optional key filter, which sees the winner of 1–2 and may replace it
"""
import html
import logging
import re
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from sqlalchemy.orm import Session

from stripe_field import settings
from stripe_field.repositories import get_option

log = logging.getLogger(__name__)

SecretSource = Literal["option", "constant", "filter", "none"]
KeyFilter = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class ResolvedSecret:
    value: str
    source: SecretSource

    @property
    def connected(self) -> bool:
        return bool(self.value)

    def hint(self) -> str:
        """Masked key for display, e.g. sk_live_…4242."""
        if not self.value:
            return ""
        prefix = self.value[:8] if self.value.startswith(("sk_", "rk_")) else ""
        return f"{prefix}…{self.value[-4:]}"


def resolve_secret_key(
    option_value: Optional[str],
    constant_value: Optional[str] = None,
    key_filter: Optional[KeyFilter] = None,
) -> ResolvedSecret:
    value, source = (option_value or "").strip(), "option"
    if not value:
        value, source = (constant_value or "").strip(), "constant"
    if key_filter is not None:
        filtered = (key_filter(value) or "").strip()
        if filtered != value:
            value, source = filtered, "filter"
    if not value:
        source = "none"
    return ResolvedSecret(value, source)


def secret_key_for(db: Session, key_filter: Optional[KeyFilter] = None) -> ResolvedSecret:
    """Resolve the key from the options table and the environment constant."""
    resolved = resolve_secret_key(
        get_option(db, settings.SECRET_KEY_OPTION),
        settings.SECRET_KEY_CONSTANT,
        key_filter,
    )
    log.debug("stripe secret key resolved: source=%s length=%d", resolved.source, len(resolved.value))
    return resolved


def sanitize_text(value: Optional[str]) -> str:
    """Strip tags and control characters, collapse whitespace, trim."""
    if not value:
        return ""
    text = re.sub(r"<[^>]*>", "", html.unescape(str(value)))
    text = re.sub(r"[\x00-\x1f\x7f]", " ", text)
    return re.sub(r"\s+", " ", text).strip()
