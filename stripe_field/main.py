import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from .credentials import ResolvedSecret, secret_key_for
from .db import engine, Base, SessionLocal
from .dependencies import get_secret
from .routers.admin import router as admin_router
from .routers.fields import router as fields_router
from .routers.search import router as search_router
from stripe_field.setup_logging import setup_logging

# --------------------------------------------------------------------
# App bootstrap
# --------------------------------------------------------------------
setup_logging() # Init Logging
log = logging.getLogger(__name__)

# Create database tables if they don’t exist.
Base.metadata.create_all(bind=engine)

# --------------------------------------------------------------------
# FastAPI application with lifespan hook
# --------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Runs once at startup and once at shutdown.
    Reports whether a Stripe key is configured; the service still starts
    without one and every remote feature answers "not configured".
    """
    db = SessionLocal()
    try:
        secret = secret_key_for(db)
    finally:
        db.close()
    if secret.connected:
        log.info("stripe field service started; key source=%s", secret.source)
    else:
        log.warning("stripe field service started without a Stripe secret key")
    yield

# Create the FastAPI app instance
app = FastAPI(title="Stripe Field Service", lifespan=lifespan)

# --------------------------------------------------------------------
# Routes
# --------------------------------------------------------------------
@app.get("/healthz")
def health(secret: ResolvedSecret = Depends(get_secret)):
    """
    Simple health probe for monitoring.
    Returns:
      - ok: static True if the app is alive
      - connected: True when a Stripe secret key is configured
    """
    return {
        "ok": True,
        "service": "stripe-field",
        "version": 1,
        "connected": secret.connected,
    }

# Register API routers:
app.include_router(search_router)
app.include_router(fields_router)
app.include_router(admin_router)
