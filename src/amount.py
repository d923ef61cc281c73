"""
Fixed-point monetary amounts.

An Amount is a non-negative integer scaled by 10^4, so "10.85" is stored as
108500. The backing value is bounded to an unsigned 64-bit range and all
arithmetic is checked: results outside [0, MAX_SCALED_VALUE] raise instead
of wrapping.
"""

import re
from dataclasses import dataclass

from exceptions import AmountOverflowError, AmountUnderflowError, MalformedAmountError

DECIMALS = 4
DECIMAL_MULTIPLIER = 10 ** DECIMALS
MAX_SCALED_VALUE = 2 ** 64 - 1

_DIGITS = re.compile(r"[0-9]+")


def _parse_unsigned(text: str, original: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise MalformedAmountError(f"not a decimal number: {original!r}")
    return int(text)


def _check_range(value: int, original: str) -> int:
    if value > MAX_SCALED_VALUE:
        raise MalformedAmountError(f"amount out of range: {original!r}")
    return value


@dataclass(frozen=True, order=True)
class Amount:
    value: int = 0

    def __post_init__(self):
        if self.value < 0:
            raise AmountUnderflowError(f"negative amount: {self.value}")
        if self.value > MAX_SCALED_VALUE:
            raise AmountOverflowError(f"amount exceeds {MAX_SCALED_VALUE}: {self.value}")

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """
        Parse decimal text with at most 4 fractional digits.

        "10" -> 10.0000, "0.15" -> 0.1500. Rejects a leading or trailing dot,
        more than 4 fractional digits, anything that is not a non-negative
        integer either side of the dot, and values that do not fit.
        Whitespace is not trimmed here.
        """
        dot_index = text.find(".")

        if dot_index == -1:
            integer_part = _parse_unsigned(text, text)
            return cls(_check_range(integer_part * DECIMAL_MULTIPLIER, text))

        if dot_index == 0 or dot_index == len(text) - 1:
            raise MalformedAmountError(f"not a decimal number: {text!r}")

        if dot_index + DECIMALS + 1 < len(text):
            raise MalformedAmountError(f"at most {DECIMALS} decimal places allowed: {text!r}")

        integer_part = _parse_unsigned(text[:dot_index], text)
        fraction_digits = text[dot_index + 1:]
        fraction_part = _parse_unsigned(fraction_digits, text)

        # "0.15": two digits given, scale by 10^2 to fill four places
        fraction_scale = 10 ** (DECIMALS - len(fraction_digits))
        scaled = integer_part * DECIMAL_MULTIPLIER + fraction_part * fraction_scale
        return cls(_check_range(scaled, text))

    def format(self) -> str:
        """Render with exactly 4 zero-padded fractional digits."""
        integer_part, fraction_part = divmod(self.value, DECIMAL_MULTIPLIER)
        return f"{integer_part}.{fraction_part:0{DECIMALS}d}"

    def checked_add(self, other: "Amount") -> "Amount":
        result = self.value + other.value
        if result > MAX_SCALED_VALUE:
            raise AmountOverflowError(f"integer overflow: {self} + {other}")
        return Amount(result)

    def checked_sub(self, other: "Amount") -> "Amount":
        if self.value < other.value:
            raise AmountUnderflowError(f"integer underflow: {self} - {other}")
        return Amount(self.value - other.value)

    def is_zero(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return self.format()


ZERO = Amount(0)
