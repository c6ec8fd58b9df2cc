"""Provenance artifact exports"""

from .models import ItemCondition, ItemUnit, ProvenanceInput, ProvenanceRecord, ProvenanceSummary
from .service import ProvenanceService

__all__ = [
    "ItemCondition",
    "ItemUnit",
    "ProvenanceInput",
    "ProvenanceRecord",
    "ProvenanceService",
    "ProvenanceSummary",
]
