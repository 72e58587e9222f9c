from .base import Normalizer
from .kinds import KINDS, KindSpec, build_label, get_kind
from .records import RecordNormalizer, normalize
from .types import ObjectKind, PlanLabeler, Record, classify_value

__all__ = [
    "Normalizer",
    "RecordNormalizer",
    "normalize",
    "build_label",
    "get_kind",
    "KINDS",
    "KindSpec",
    "ObjectKind",
    "PlanLabeler",
    "Record",
    "classify_value",
]
