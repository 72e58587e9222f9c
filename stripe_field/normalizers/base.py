# stripe_field/normalizers/base.py
from typing import Any, Protocol
from .types import ObjectKind, Record

class Normalizer(Protocol):
    def normalize_record(self, kind: ObjectKind, rec: Any) -> Record:
        """Return a NEW canonical record. Do not mutate `rec`."""
        ...
