"""Holding domain model."""

from dataclasses import dataclass

from wealthtrack.domain.models.transaction import DEFAULT_CATEGORY

# Float leftovers of fractional trades below this count as a closed position
QUANTITY_EPSILON = 1e-9


@dataclass
class Holding:
    """
    Derived position in one instrument as of a cutoff date.

    IMPORTANT: Never persisted; always recomputed from the ledger.
    """

    instrument_id: str
    quantity: float = 0.0
    total_cost: float = 0.0
    category: str = DEFAULT_CATEGORY

    @property
    def avg_price(self) -> float:
        """Average cost per unit (total_cost / quantity)."""
        if self.quantity <= QUANTITY_EPSILON:
            return 0.0
        return self.total_cost / self.quantity

    @property
    def is_open(self) -> bool:
        return self.quantity > QUANTITY_EPSILON
