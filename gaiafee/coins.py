"""Coin and decimal-coin values used to express fees and gas prices."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

_DENOM_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}")


def validate_denom(denom: str) -> None:
    """Raise ValueError unless ``denom`` is a valid coin denomination."""
    if not isinstance(denom, str) or not _DENOM_RE.fullmatch(denom):
        raise ValueError(f"invalid denom: {denom}")


@dataclass(frozen=True)
class Coin:
    """An integer amount of a single denomination."""

    denom: str
    amount: int = 0

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class DecCoin:
    """A decimal amount of a single denomination, such as a gas price."""

    denom: str
    amount: Decimal = Decimal(0)

    def __post_init__(self) -> None:
        amount = self.amount
        if isinstance(amount, float):
            amount = str(amount)
        object.__setattr__(self, "amount", Decimal(amount))

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __str__(self) -> str:
        return f"{self.amount:.18f}{self.denom}"


class Coins(Sequence):
    """An immutable, ordered collection of coins."""

    __slots__ = ("_coins",)

    def __init__(self, coins: Iterable[Coin] = ()) -> None:
        self._coins = tuple(coins)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Coins(self._coins[index])
        return self._coins[index]

    def __len__(self) -> int:
        return len(self._coins)

    def __iter__(self):
        return iter(self._coins)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Coins):
            return self._coins == other._coins
        if isinstance(other, (list, tuple)):
            return self._coins == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._coins)

    def __repr__(self) -> str:
        return f"Coins({list(self._coins)!r})"

    def __str__(self) -> str:
        return ",".join(str(coin) for coin in self._coins)

    def sorted(self) -> Coins:
        """Return the coins ordered by denomination."""
        return Coins(sorted(self._coins, key=lambda coin: coin.denom))

    def is_zero(self) -> bool:
        """True when every coin has a zero amount (an empty set counts)."""
        return all(coin.is_zero() for coin in self._coins)

    def amount_of(self, denom: str) -> int:
        return next((coin.amount for coin in self._coins if coin.denom == denom), 0)

    def denoms_subset_of(self, other: Coins) -> bool:
        """True when every denomination here has a non-zero amount in ``other``."""
        if len(self) > len(other):
            return False
        return all(other.amount_of(coin.denom) != 0 for coin in self._coins)

    def is_any_gte(self, other: Coins) -> bool:
        """True when some coin is at least the matching non-zero amount in ``other``."""
        if not other:
            return False
        for coin in self._coins:
            amount = other.amount_of(coin.denom)
            if amount != 0 and coin.amount >= amount:
                return True
        return False

    def is_any_gt(self, other: Coins) -> bool:
        """True when some coin exceeds the matching non-zero amount in ``other``."""
        if not other:
            return False
        for coin in self._coins:
            amount = other.amount_of(coin.denom)
            if amount != 0 and coin.amount > amount:
                return True
        return False


def new_coins(*args: Coin) -> Coins:
    """Build a sanitized coin set: zero coins dropped, sorted, then validated."""
    for coin in args:
        validate_denom(coin.denom)
        if coin.is_negative():
            raise ValueError(f"negative coin amount: {coin.amount}")
    coins = Coins(coin for coin in args if not coin.is_zero()).sorted()
    seen: set[str] = set()
    for coin in coins:
        if coin.denom in seen:
            raise ValueError(f"duplicate denomination {coin.denom}")
        seen.add(coin.denom)
    return coins