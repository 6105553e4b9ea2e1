"""Shared type aliases for catalogbench."""

from __future__ import annotations

from typing import Any

# A decoded JSON object (product record, request body, config section).
JsonDict = dict[str, Any]

# Product categories offered by the test client. The service accepts any
# non-empty string and stores ``DEFAULT_CATEGORY`` when none is given.
SUGGESTED_CATEGORIES: tuple[str, ...] = (
    "electronics",
    "clothing",
    "books",
    "furniture",
    "food",
    "toys",
    "sports",
    "appliances",
    "other",
)

DEFAULT_CATEGORY = "other"
