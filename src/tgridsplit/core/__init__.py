"""Core functionality for tgridsplit."""

from tgridsplit.core.config import ImportConfig, SectionIds, NATIVE_FORMAT

__all__ = ["ImportConfig", "SectionIds", "NATIVE_FORMAT"]
