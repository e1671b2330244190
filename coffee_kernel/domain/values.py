"""
Values -- Decimal helpers and the Money value object.

Responsibility:
    Provides the foundational numeric handling for every liquidation
    computation: lenient coercion of raw user/storage input into Decimal,
    the single sanctioned rounding function, and the Money value object
    used at the presentation boundary.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module. No outward dependencies.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str`` and
      never participate in arithmetic directly.
    - Lenient coercion: ``to_decimal`` and ``to_int`` NEVER raise.  Blank,
      missing, non-numeric, boolean, NaN, infinite and absurdly large input
      becomes zero, so a ledger can always be rendered.
    - ``round_money`` is the ONLY rounding function used for money.

Failure modes:
    - ValueError on Money construction with an invalid currency code.
    - TypeError when Money arithmetic is attempted with a non-Money operand.
    - ValueError when Money arithmetic mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

ZERO = Decimal("0")

MONEY_DECIMAL_PLACES = 2
DEFAULT_CURRENCY = "USD"

# Inputs above 10**12 are treated as garbage, like non-numeric text.
MAX_ADJUSTED_EXPONENT = 12

# Working precision for quantizing totals built from bounded inputs.
_ROUNDING_PRECISION = 60


def to_decimal(value: Any) -> Decimal:
    """
    Coerce any raw value into a finite Decimal.

    Postconditions:
        - Returns a finite Decimal.
        - None, "", whitespace, booleans, non-numeric text, NaN and
          infinities all map to ``Decimal("0")``.
        - Magnitudes of 10**13 or more also map to zero, so downstream
          products and quantization stay within Decimal precision.

    Raises:
        Nothing.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite():
        return ZERO
    if result and result.adjusted() > MAX_ADJUSTED_EXPONENT:
        return ZERO
    return result


def to_int(value: Any) -> int:
    """Coerce a raw count (bags, units) into an int, truncating fractions."""
    return int(to_decimal(value))


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the ONLY sanctioned rounding function for money.  Seeded
    deduction amounts and presentation values delegate here.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    amount = value if isinstance(value, Decimal) and value.is_finite() else to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        return amount.quantize(Decimal(quantize_str), rounding=rounding)


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with an ISO 4217 currency code.  Used when
        handing computed figures to the rendering layer, which formats
        them as currency.

    Guarantees:
        - Immutable and hashable.
        - amount is always a Decimal (never float).
        - currency is always a three-letter uppercase code.
        - Arithmetic enforces same-currency operands.

    Non-goals:
        - Does NOT perform currency conversion.
        - Does NOT auto-round -- callers use ``round()``.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        code = self.currency.upper().strip() if isinstance(self.currency, str) else ""
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Invalid ISO 4217 currency code: {self.currency}")
        object.__setattr__(self, "currency", code)

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str = DEFAULT_CURRENCY) -> Money:
        """Factory method for creating Money."""
        if isinstance(amount, (str, int)):
            amount = Decimal(str(amount))
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=ZERO, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Return a new Money rounded to cents."""
        return Money(amount=round_money(self.amount, rounding=rounding), currency=self.currency)

    def _check(self, other: Any) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot combine Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        self._check(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"
