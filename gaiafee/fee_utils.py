"""Helpers for comparing fee coins against fee requirements."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from gaiafee.coins import Coin, Coins


class FeeError(ValueError):
    """Raised when a fee requirement cannot be computed or is not met."""


def contain_zero_coins(coins: Iterable[Coin]) -> bool:
    """True when ``coins`` is empty or holds at least one zero coin."""
    coins = list(coins)
    return not coins or any(coin.is_zero() for coin in coins)


def find(coins: Sequence[Coin], denom: str) -> Coin | None:
    """Binary-search coins sorted by denomination; return the match or None."""
    lo, hi = 0, len(coins)
    while hi - lo > 1:
        mid = lo + (hi - lo) // 2
        coin = coins[mid]
        if denom < coin.denom:
            hi = mid
        elif denom == coin.denom:
            return coin
        else:
            lo = mid + 1
    if hi - lo == 1 and coins[lo].denom == denom:
        return coins[lo]
    return None


def combined_fee_requirement(global_fees: Coins, min_gas_prices: Coins) -> Coins:
    """Combine global fees with local minimum fees, keeping the higher amount.

    Only denominations present in the global fees are kept. Raises FeeError
    when the global fees are empty.
    """
    if not global_fees:
        raise FeeError("global fee cannot be empty")
    if not min_gas_prices:
        return global_fees

    combined = []
    for fee in global_fees:
        local = find(min_gas_prices, fee.denom)
        if local is not None and local.amount > fee.amount:
            combined.append(local)
        else:
            combined.append(fee)
    return Coins(combined).sorted()


def split_coins_by_denoms(fee_coins: Iterable[Coin], denoms) -> tuple[Coins, Coins]:
    """Split coins into those whose denom is not in ``denoms`` and those whose is."""
    outside, inside = [], []
    for coin in fee_coins:
        (inside if coin.denom in denoms else outside).append(coin)
    return Coins(outside).sorted(), Coins(inside).sorted()


def non_zero_fees(fees: Iterable[Coin]) -> tuple[Coins, set[str]]:
    """Return the non-zero fees, sorted, and the set of zero-fee denominations."""
    non_zero = []
    zero_denoms: set[str] = set()
    for fee in fees:
        if fee.is_zero():
            zero_denoms.add(fee.denom)
        else:
            non_zero.append(fee)
    return Coins(non_zero).sorted(), zero_denoms