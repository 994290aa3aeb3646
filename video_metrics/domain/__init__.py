"""Domain layer package."""

from .models import CanonicalRecord, DateRange, Granularity

__all__ = ["CanonicalRecord", "DateRange", "Granularity"]
