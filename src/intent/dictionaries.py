"""Spanish/English token dictionaries.

These sets drive the tri-state boolean coercion (catalog cells and plan filters alike) and the
rental/sale split used by ranking. Keep them small and deterministic.
"""

from __future__ import annotations

TRUE_TOKENS: frozenset[str] = frozenset({"1", "true", "t", "si", "sí", "yes", "y"})

FALSE_TOKENS: frozenset[str] = frozenset({"0", "false", "f", "no", "n"})

# Compared against the accent-folded, lowercased `operation_type`.
RENTAL_OPERATION_TYPES: frozenset[str] = frozenset({"alquiler", "rental", "rent"})


def is_rental(folded_operation_type: str) -> bool:
    """Whether a folded operation type denotes a rental listing."""

    return folded_operation_type in RENTAL_OPERATION_TYPES
