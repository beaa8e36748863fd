"""Palette generation."""

from __future__ import annotations

from colorlab.core.constants import PALETTE_NAMES


def generate_palette(number_of_colors: int) -> list[str]:
    """
    Return the first *number_of_colors* palette names.

    Range checks against MIN_COLORS/MAX_COLORS belong to run validation;
    here only the physical palette size is enforced.
    """
    if not 1 <= number_of_colors <= len(PALETTE_NAMES):
        raise ValueError(
            f"Palette size must be between 1 and {len(PALETTE_NAMES)}, "
            f"got {number_of_colors}."
        )
    return list(PALETTE_NAMES[:number_of_colors])
