# stripe_field/settings.py
import os
import secrets
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(PROJECT_ROOT / ".env")

# Storage for options and field values
DATABASE_URL = os.getenv("STRIPE_FIELD_DATABASE_URL", "sqlite:///./stripe_field.sqlite3")

# Stripe API
STRIPE_API_BASE = os.getenv("STRIPE_API_BASE", "https://api.stripe.com")
STRIPE_API_VERSION = "2022-11-15"
STRIPE_TIMEOUT = float(os.getenv("STRIPE_TIMEOUT", "30"))

# Secret key sources (see credentials.resolve_secret_key)
OPTION_PREFIX = "acf_stripe_"
SECRET_KEY_OPTION = OPTION_PREFIX + "secret_key"
SECRET_KEY_CONSTANT = os.getenv("ACF_STRIPE_SECRET_KEY", "")

# Search behaviour
PAGE_SIZE = 20
SEARCH_TERM_MAX = 50

# Caller authorization
EDITOR_TOKENS = {t.strip() for t in os.getenv("STRIPE_FIELD_EDITOR_TOKENS", "").split(",") if t.strip()}
ADMIN_TOKENS = {t.strip() for t in os.getenv("STRIPE_FIELD_ADMIN_TOKENS", "").split(",") if t.strip()}
NONCE_SECRET = os.getenv("STRIPE_FIELD_NONCE_SECRET") or secrets.token_hex(32)
NONCE_LIFETIME = 24 * 60 * 60

# Subscription labels look up plan → product names (two extra calls per plan)
RESOLVE_PLAN_LABELS = os.getenv("STRIPE_FIELD_RESOLVE_PLAN_LABELS", "true").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
