"""Money value object: rupee amounts held as whole paise."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Integer

from ordering.domain import ordering

_PAISE_PER_RUPEE = Decimal(100)


def _to_decimal(value) -> Decimal:
    # str() first so floats like 2.5 arrive as the literal the user typed
    return value if isinstance(value, Decimal) else Decimal(str(value))


@ordering.value_object
class Money:
    """Non-negative amount in Indian rupees, stored as integer paise.

    Totals are exact integer sums. Rounding happens only when a rupee amount
    is multiplied by a fractional factor (fabric meters), half-up to the paisa.
    """

    paise: Integer(required=True, min_value=0)

    @classmethod
    def of(cls, rupees) -> "Money":
        amount = (_to_decimal(rupees) * _PAISE_PER_RUPEE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(paise=int(amount))

    @classmethod
    def zero(cls) -> "Money":
        return cls(paise=0)

    @classmethod
    def sum_of(cls, amounts: Iterable["Money"]) -> "Money":
        return cls(paise=sum(amount.paise for amount in amounts))

    @property
    def rupees(self) -> Decimal:
        return (Decimal(self.paise) / _PAISE_PER_RUPEE).quantize(Decimal("0.01"))

    def times(self, factor) -> "Money":
        amount = (Decimal(self.paise) * _to_decimal(factor)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return Money(paise=int(amount))

    def __add__(self, other: "Money") -> "Money":
        return Money(paise=self.paise + other.paise)

    def __str__(self) -> str:
        return f"₹{self.rupees:,}"
