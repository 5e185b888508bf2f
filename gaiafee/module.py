"""The global fee module: genesis handling and the parameter query service."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol

from gaiafee.coins import DecCoin
from gaiafee.params import (
    MODULE_NAME,
    PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES,
    PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE,
    PARAM_STORE_KEY_MIN_GAS_PRICES,
    QUERIER_ROUTE,
    GenesisState,
    ParamsError,
    Subspace,
    default_params,
    param_key_table,
)

CONSENSUS_VERSION = 1


class ParamSource(Protocol):
    """A read-only view of a parameter store."""

    def has(self, key: bytes) -> bool: ...

    def get(self, key: bytes) -> Any: ...


@dataclass
class QueryParamsResponse:
    """The global fee parameters as answered by the query service."""

    minimum_gas_prices: list[DecCoin] = field(default_factory=list)
    bypass_min_fee_msg_types: list[str] = field(default_factory=list)
    max_total_bypass_min_fee_msg_gas_usage: int = 0


@dataclass
class GrpcQuerier:
    """Answers queries for the global fee parameters from a parameter source."""

    param_source: ParamSource

    def params(self) -> QueryParamsResponse:
        """Return the stored parameters; unset ones are reported empty or zero."""
        source = self.param_source
        response = QueryParamsResponse()
        if source.has(PARAM_STORE_KEY_MIN_GAS_PRICES):
            response.minimum_gas_prices = list(source.get(PARAM_STORE_KEY_MIN_GAS_PRICES))
        if source.has(PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES):
            response.bypass_min_fee_msg_types = list(
                source.get(PARAM_STORE_KEY_BYPASS_MIN_FEE_MSG_TYPES)
            )
        if source.has(PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE):
            response.max_total_bypass_min_fee_msg_gas_usage = source.get(
                PARAM_STORE_KEY_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE
            )
        return response


def _load_genesis(message: str | bytes | bytearray) -> GenesisState:
    if isinstance(message, (bytes, bytearray)):
        message = message.decode("utf-8")
    try:
        data = json.loads(message)
    except json.JSONDecodeError as exc:
        raise ParamsError(f"invalid genesis JSON: {exc}") from exc
    return GenesisState.from_dict(data)


class GlobalFeeModule:
    """The global fee module bound to its parameter subspace."""

    name = MODULE_NAME
    querier_route = QUERIER_ROUTE

    def __init__(self, param_space: Subspace) -> None:
        if not param_space.has_key_table:
            param_space.key_table = param_key_table()
        self.param_space = param_space

    def default_genesis(self) -> str:
        """The default genesis state as JSON."""
        return json.dumps(GenesisState(default_params()).to_dict())

    def validate_genesis(self, message: str | bytes) -> None:
        """Raise ParamsError if the genesis JSON is malformed or its params invalid."""
        state = _load_genesis(message)
        try:
            state.params.validate_basic()
        except ParamsError as exc:
            raise ParamsError(f"params: {exc}") from exc

    def init_genesis(self, message: str | bytes) -> None:
        """Store the parameters held in the genesis JSON."""
        state = _load_genesis(message)
        self.param_space.set_param_set(state.params)

    def export_genesis(self) -> str:
        """The stored parameters as genesis JSON."""
        return json.dumps(GenesisState(self.param_space.get_param_set()).to_dict())

    def querier(self) -> GrpcQuerier:
        """The query service reading from this module's parameters."""
        return GrpcQuerier(self.param_space)

    def consensus_version(self) -> int:
        return CONSENSUS_VERSION