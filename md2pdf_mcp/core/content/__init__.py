"""
Content Resolution
==================

Resolve document locators (local paths, URLs, object storage URIs) to text.
"""

from .resolver import ContentResolver, LocatorKind, classify_locator

__all__ = ["ContentResolver", "LocatorKind", "classify_locator"]
