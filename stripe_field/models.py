from sqlalchemy import Column, String, Text, DateTime, func
from .db import Base

# -----------------------------
# ORM models (tables) for the field service
# -----------------------------
class Option(Base):
    __tablename__ = "options"
    # Plugin-level settings, e.g. acf_stripe_secret_key
    key   = Column(String, primary_key=True)
    value = Column(Text)


class FieldValue(Base):
    __tablename__ = "field_values"
    # One stored field on a host record. `value` is written verbatim:
    # JSON text of a canonical record, or a legacy bare Stripe ID.
    object_id  = Column(String, primary_key=True)            # host record (post) ID
    field_name = Column(String, primary_key=True)
    kind       = Column(String, nullable=False)              # customer/subscription/product
    value      = Column(Text)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<FieldValue(object_id={self.object_id}, field_name={self.field_name}, kind={self.kind})>"
