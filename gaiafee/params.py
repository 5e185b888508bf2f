"""Global fee parameters, genesis state and an in-memory parameter store."""

from __future__ import annotations

import copy
import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from gaiafee.coins import Coins, DecCoin, validate_denom

MODULE_NAME = "globalfee"
QUERIER_ROUTE = MODULE_NAME

PARAM_STORE_KEY_MIN_GAS_PRICES = b"MinimumGasPricesParam"
PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES = b"BypassMinFeeMsgTypes"
PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE = b"MaxTotalBypassMinFeeMsgGasUsage"

MSG_TYPE_URL_PREFIX = "/"

# The effective default is a zero coin in the staking bond denom, chosen at runtime.
DEFAULT_MIN_GAS_PRICES: tuple[DecCoin, ...] = ()
DEFAULT_BYPASS_MIN_FEE_MSG_TYPES: tuple[str, ...] = (
    "/ibc.core.channel.v1.MsgRecvPacket",
    "/ibc.core.channel.v1.MsgAcknowledgement",
    "/ibc.core.client.v1.MsgUpdateClient",
    "/ibc.core.channel.v1.MsgTimeout",
    "/ibc.core.channel.v1.MsgTimeoutOnClose",
)
DEFAULT_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE = 1_000_000

_MAX_UINT64 = 2**64 - 1
_DEC_RE = re.compile(r"-?\d+(\.\d{1,18})?")


class ParamsError(ValueError):
    """Raised when global fee parameters or genesis data are invalid."""


def validate_dec_coins(coins) -> None:
    """Check coins are sorted, unique, non-negative and validly named."""
    low_denom = ""
    seen: set[str] = set()
    for index, coin in enumerate(coins):
        if coin.denom in seen:
            raise ParamsError(f"duplicate denomination {coin.denom}")
        try:
            validate_denom(coin.denom)
        except ValueError as exc:
            raise ParamsError(str(exc)) from exc
        if index != 0 and coin.denom <= low_denom:
            raise ParamsError(f"denomination {coin.denom} is not sorted")
        if coin.is_negative():
            raise ParamsError(f"coin {coin.amount:.18f} amount is negative")
        low_denom = coin.denom
        seen.add(coin.denom)


def validate_minimum_gas_prices(value: Any) -> None:
    if (
        isinstance(value, Coins)
        or not isinstance(value, (list, tuple))
        or not all(isinstance(coin, DecCoin) for coin in value)
    ):
        raise ParamsError(f"type: {type(value).__name__}, expected DecCoins")
    validate_dec_coins(value)


def validate_bypass_min_fee_msg_types(value: Any) -> None:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ParamsError(f"type: {type(value).__name__}, expected list of message type URLs")
    for msg_type in value:
        if msg_type == "":
            raise ParamsError("invalid empty bypass msg type")
        if not msg_type.startswith(MSG_TYPE_URL_PREFIX):
            raise ParamsError(f"invalid bypass msg type name {msg_type}")


def validate_max_total_bypass_min_fee_msg_gas_usage(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _MAX_UINT64:
        raise ParamsError(f"type: {type(value).__name__}, expected uint64")


def _format_dec(amount: Decimal) -> str:
    return f"{amount:.18f}"


def _parse_dec(text: Any) -> Decimal:
    if not isinstance(text, str) or not _DEC_RE.fullmatch(text):
        raise ParamsError(f"invalid decimal amount: {text!r}")
    return Decimal(text)


def _parse_uint64(value: Any) -> int:
    if isinstance(value, bool):
        raise ParamsError(f"invalid uint64 value: {value!r}")
    if isinstance(value, str):
        if not value.isdigit():
            raise ParamsError(f"invalid uint64 value: {value!r}")
        value = int(value)
    if not isinstance(value, int) or not 0 <= value <= _MAX_UINT64:
        raise ParamsError(f"invalid uint64 value: {value!r}")
    return value


@dataclass
class Params:
    """The global fee module's parameters."""

    minimum_gas_prices: list[DecCoin] = field(default_factory=list)
    bypass_min_fee_msg_types: list[str] = field(default_factory=list)
    max_total_bypass_min_fee_msg_gas_usage: int = 0

    def _pairs(self) -> list[tuple[bytes, str, Callable[[Any], None]]]:
        return [
            (PARAM_STORE_KEY_MIN_GAS_PRICES, "minimum_gas_prices", validate_minimum_gas_prices),
            (
                PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES,
                "bypass_min_fee_msg_types",
                validate_bypass_min_fee_msg_types,
            ),
            (
                PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE,
                "max_total_bypass_min_fee_msg_gas_usage",
                validate_max_total_bypass_min_fee_msg_gas_usage,
            ),
        ]

    def validate_basic(self) -> None:
        """Raise ParamsError if any parameter is invalid."""
        for _, attr, validator in self._pairs():
            validator(getattr(self, attr))

    def to_dict(self) -> dict[str, Any]:
        return {
            "minimum_gas_prices": [
                {"denom": coin.denom, "amount": _format_dec(coin.amount)}
                for coin in self.minimum_gas_prices
            ],
            "bypass_min_fee_msg_types": list(self.bypass_min_fee_msg_types),
            "max_total_bypass_min_fee_msg_gas_usage": str(
                self.max_total_bypass_min_fee_msg_gas_usage
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Params:
        if not isinstance(data, Mapping):
            raise ParamsError("params must be an object")
        raw_prices = data.get("minimum_gas_prices") or []
        if not isinstance(raw_prices, list):
            raise ParamsError("minimum_gas_prices must be a list")
        prices = []
        for item in raw_prices:
            if not isinstance(item, Mapping):
                raise ParamsError("minimum gas price must be an object")
            denom = item.get("denom", "")
            if not isinstance(denom, str):
                raise ParamsError(f"invalid denom: {denom!r}")
            prices.append(DecCoin(denom, _parse_dec(item.get("amount", "0"))))
        raw_types = data.get("bypass_min_fee_msg_types") or []
        if not isinstance(raw_types, list) or not all(isinstance(t, str) for t in raw_types):
            raise ParamsError("bypass_min_fee_msg_types must be a list of strings")
        max_gas = _parse_uint64(data.get("max_total_bypass_min_fee_msg_gas_usage", 0))
        return cls(prices, list(raw_types), max_gas)


def default_params() -> Params:
    return Params(
        minimum_gas_prices=list(DEFAULT_MIN_GAS_PRICES),
        bypass_min_fee_msg_types=list(DEFAULT_BYPASS_MIN_FEE_MSG_TYPES),
        max_total_bypass_min_fee_msg_gas_usage=DEFAULT_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE,
    )


def param_key_table() -> dict[bytes, Callable[[Any], None]]:
    """The keys of the global fee parameters with their validators."""
    return {key: validator for key, _, validator in Params()._pairs()}


@dataclass
class GenesisState:
    """The module's genesis state."""

    params: Params = field(default_factory=Params)

    def to_dict(self) -> dict[str, Any]:
        return {"params": self.params.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GenesisState:
        if not isinstance(data, Mapping):
            raise ParamsError("genesis state must be an object")
        return cls(Params.from_dict(data.get("params") or {}))


def default_genesis_state() -> GenesisState:
    return GenesisState(default_params())


def validate_genesis(data: GenesisState) -> None:
    try:
        data.params.validate_basic()
    except ParamsError as exc:
        raise ParamsError(f"globalfee params: {exc}") from exc


def genesis_state_from_app_state(app_state: Mapping[str, Any]) -> GenesisState:
    """Extract this module's genesis state from the application genesis state."""
    raw = app_state.get(MODULE_NAME)
    if raw is None:
        return GenesisState()
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParamsError(f"invalid genesis JSON: {exc}") from exc
    return GenesisState.from_dict(raw)


@dataclass
class Subspace:
    """An in-memory parameter store, optionally restricted to a key table."""

    name: str
    key_table: dict[bytes, Callable[[Any], None]] | None = None
    _store: dict[bytes, Any] = field(default_factory=dict, init=False, repr=False)

    @property
    def has_key_table(self) -> bool:
        return self.key_table is not None

    def has(self, key: bytes) -> bool:
        return key in self._store

    def get(self, key: bytes) -> Any:
        if key not in self._store:
            raise KeyError(f"parameter {key!r} not set in subspace {self.name}")
        return copy.deepcopy(self._store[key])

    def set(self, key: bytes, value: Any) -> None:
        if self.key_table is not None and key not in self.key_table:
            raise KeyError(f"parameter {key!r} not registered in subspace {self.name}")
        self._store[key] = copy.deepcopy(value)

    def set_param_set(self, params: Params) -> None:
        """Validate and store every parameter of ``params``."""
        for key, attr, validator in params._pairs():
            value = getattr(params, attr)
            try:
                validator(value)
            except ParamsError as exc:
                raise ParamsError(f"value from ParamSetPair is invalid: {exc}") from exc
            self.set(key, value)

    def get_param_set(self) -> Params:
        """Read every parameter back; raises KeyError if one was never set."""
        return Params(**{attr: self.get(key) for key, attr, _ in Params()._pairs()})