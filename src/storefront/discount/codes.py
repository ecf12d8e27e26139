"""Promotional codes and the Discount value they resolve to."""

from dataclasses import dataclass

DISCOUNT_CODES = {
    "AURA20": 0.20,
}


@dataclass(frozen=True)
class Discount:
    code: str = ""
    percentage: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.percentage > 0


NO_DISCOUNT = Discount()


def percentage_for(code) -> float | None:
    """Return the percentage for a known code (exact, case-sensitive) or None."""
    if not isinstance(code, str):
        return None
    return DISCOUNT_CODES.get(code)
