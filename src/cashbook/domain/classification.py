"""Chart account type classification.

The store knows five account types. The sixth exposed type, ``cost``, is a
subtype of ``expense`` flagged by a marker token in the description. Every
read goes through :func:`exposed_type` and every write through
:func:`storage_fields`, so the stored type and the marker never disagree.
"""

import re
from typing import Optional

from cashbook.domain.entities import ChartAccountType

COST_MARKER = "[COST]"
# Marker written by earlier releases; still recognised on read, replaced on write.
LEGACY_COST_MARKERS = ("[CUSTO]",)

STORED_TYPES = frozenset(
    {
        ChartAccountType.ASSET,
        ChartAccountType.LIABILITY,
        ChartAccountType.EQUITY,
        ChartAccountType.REVENUE,
        ChartAccountType.EXPENSE,
    }
)

_ALL_MARKERS = (COST_MARKER, *LEGACY_COST_MARKERS)
_MARKER_PATTERN = re.compile(
    r"\s*(?:" + "|".join(re.escape(marker) for marker in _ALL_MARKERS) + r")\s*"
)


def has_cost_marker(description: Optional[str]) -> bool:
    """Check whether a description carries a cost marker."""
    if not description:
        return False
    return any(marker in description for marker in _ALL_MARKERS)


def strip_cost_marker(description: Optional[str]) -> str:
    """Remove every cost marker from a description."""
    if not description:
        return ""
    return _MARKER_PATTERN.sub(" ", description).strip()


def exposed_type(stored_type: str, description: Optional[str]) -> ChartAccountType:
    """Derive the exposed type from the stored type and description.

    Args:
        stored_type: One of the five persisted type values
        description: Stored description text

    Returns:
        ChartAccountType, COST when an expense row carries the marker
    """
    account_type = ChartAccountType(stored_type)
    if account_type == ChartAccountType.EXPENSE and has_cost_marker(description):
        return ChartAccountType.COST
    return account_type


def storage_fields(
    account_type: ChartAccountType, description: Optional[str]
) -> tuple[str, str]:
    """Compute the persisted (type, description) pair for an exposed type.

    COST is stored as EXPENSE with exactly one marker appended; any other
    type is stored as-is with all markers removed.
    """
    base = strip_cost_marker(description)
    if account_type == ChartAccountType.COST:
        marked = f"{base} {COST_MARKER}" if base else COST_MARKER
        return ChartAccountType.EXPENSE.value, marked
    return account_type.value, base
