"""Ante handler enforcing global fees and local minimum gas prices."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import localcontext
from typing import Any

from gaiafee.coins import Coin, Coins, DecCoin
from gaiafee.fee_utils import (
    FeeError,
    combined_fee_requirement,
    non_zero_fees,
    split_coins_by_denoms,
)
from gaiafee.params import (
    PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES,
    PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE,
    PARAM_STORE_KEY_MIN_GAS_PRICES,
    Subspace,
)

KEY_BOND_DENOM = b"BondDenom"


class InsufficientFeeError(FeeError):
    """Raised when a transaction's fee does not meet the requirement."""


class InvalidCoinsError(FeeError):
    """Raised when a transaction's fee holds more denominations than allowed."""


@dataclass(frozen=True)
class Context:
    """The execution context a transaction is checked in."""

    min_gas_prices: tuple[DecCoin, ...] = ()
    is_check_tx: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_gas_prices", tuple(self.min_gas_prices))


@dataclass(frozen=True)
class FeeTx:
    """A transaction carrying a fee, a gas limit and message type URLs."""

    fee: Coins = field(default_factory=Coins)
    gas: int = 0
    msgs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fee", Coins(self.fee))
        object.__setattr__(self, "msgs", tuple(self.msgs))


NextHandler = Callable[[Context, FeeTx, bool], Any]


def _required_fees(prices: Iterable[DecCoin], gas: int) -> Coins:
    # fee = ceil(gas price * gas limit), computed without losing precision
    with localcontext() as dctx:
        dctx.prec = 100
        return Coins(Coin(price.denom, math.ceil(price.amount * gas)) for price in prices).sorted()


def get_min_gas_price(ctx: Context, gas_limit: int) -> Coins:
    """The node's local minimum fees for ``gas_limit``; empty if all prices are zero."""
    prices = ctx.min_gas_prices
    if all(price.is_zero() for price in prices):
        return Coins()
    return _required_fees(prices, gas_limit)


@dataclass
class FeeDecorator:
    """Checks that a transaction's fee meets global fees and local minimum gas prices."""

    global_min_fee: Subspace
    staking_subspace: Subspace

    def __post_init__(self) -> None:
        if not self.global_min_fee.has_key_table:
            raise ValueError("global fee paramspace was not set up via module")
        if not self.staking_subspace.has_key_table:
            raise ValueError("staking paramspace was not set up via module")

    def ante_handle(self, ctx: Context, tx: FeeTx, simulate: bool, next_handler: NextHandler):
        """Validate the fee of ``tx`` and pass on to ``next_handler``."""
        if not isinstance(tx, FeeTx):
            raise TypeError("Tx must implement the FeeTx interface")
        if simulate:
            return next_handler(ctx, tx, simulate)

        fee_required = self.get_tx_fee_required(ctx, tx)
        if len(tx.fee) > len(fee_required):
            raise InvalidCoinsError(
                f"fee is not a subset of required fees; got {tx.fee}, required: {fee_required}"
            )

        fee_coins = tx.fee.sorted()
        gas = tx.gas
        non_zero_required, zero_denoms = non_zero_fees(fee_required)
        fee_non_zero_denom, fee_zero_denom = split_coins_by_denoms(fee_coins, zero_denoms)

        if not fee_non_zero_denom.denoms_subset_of(non_zero_required):
            raise InsufficientFeeError(
                f"fee is not a subset of required fees; got {fee_coins}, required: {fee_required}"
            )

        max_gas = self.get_max_total_bypass_min_fee_msg_gas_usage()
        within_max_gas = gas <= max_gas
        all_bypass = self.contains_only_bypass_min_fee_msgs(tx.msgs)
        if all_bypass and within_max_gas:
            return next_handler(ctx, tx, simulate)

        if not fee_coins:
            if zero_denoms:
                return next_handler(ctx, tx, simulate)
            raise InsufficientFeeError(
                f"insufficient fees; got: {fee_coins} required: {fee_required}"
            )

        if fee_zero_denom:
            return next_handler(ctx, tx, simulate)

        if not fee_non_zero_denom.is_any_gte(non_zero_required):
            if all_bypass and not within_max_gas:
                message = (
                    "Insufficient fees; bypass-min-fee-msg-types with gas consumption "
                    f"{gas} exceeds the maximum allowed gas value of {max_gas}."
                )
            else:
                message = f"Insufficient fees; got: {fee_coins} required: {fee_required}"
            raise InsufficientFeeError(message)

        return next_handler(ctx, tx, simulate)

    def get_tx_fee_required(self, ctx: Context, tx: FeeTx) -> Coins:
        """Global fees in DeliverTx; global fees combined with local prices in CheckTx."""
        global_fees = self.get_global_fee(tx)
        if not ctx.is_check_tx:
            return global_fees
        local_fees = get_min_gas_price(ctx, tx.gas)
        return combined_fee_requirement(global_fees, local_fees)

    def get_global_fee(self, tx: FeeTx) -> Coins:
        """Global fees for the transaction's gas, sorted by denomination."""
        prices: list[DecCoin] = []
        if self.global_min_fee.has(PARAM_STORE_KEY_MIN_GAS_PRICES):
            prices = list(self.global_min_fee.get(PARAM_STORE_KEY_MIN_GAS_PRICES))
        if not prices:
            prices = self.default_zero_global_fee()
        return _required_fees(prices, tx.gas)

    def default_zero_global_fee(self) -> list[DecCoin]:
        """A zero gas price in the staking bond denomination."""
        bond_denom = ""
        if self.staking_subspace.has(KEY_BOND_DENOM):
            bond_denom = self.staking_subspace.get(KEY_BOND_DENOM)
        if not bond_denom:
            raise FeeError("empty staking bond denomination")
        return [DecCoin(bond_denom, 0)]

    def contains_only_bypass_min_fee_msgs(self, msgs: Iterable[str]) -> bool:
        bypass = set(self.get_bypass_msg_types())
        return all(msg in bypass for msg in msgs)

    def get_bypass_msg_types(self) -> list[str]:
        if self.global_min_fee.has(PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES):
            return list(self.global_min_fee.get(PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES))
        return []

    def get_max_total_bypass_min_fee_msg_gas_usage(self) -> int:
        key = PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE
        if self.global_min_fee.has(key):
            return self.global_min_fee.get(key)
        return 0