from decimal import Decimal

import pytest

from gaiafee.ante import (
    KEY_BOND_DENOM,
    Context,
    FeeDecorator,
    FeeTx,
    InsufficientFeeError,
    InvalidCoinsError,
    get_min_gas_price,
)
from gaiafee.coins import Coin, Coins, DecCoin, new_coins
from gaiafee.fee_utils import FeeError
from gaiafee.params import (
    DEFAULT_BYPASS_MIN_FEE_MSG_TYPES,
    DEFAULT_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE,
    MODULE_NAME,
    Params,
    Subspace,
    param_key_table,
)

BOND_DENOM = "uatom"
GAS_LIMIT = 200_000

HIGH = Decimal("0.004")
MED = Decimal("0.002")
LOW = Decimal("0.001")
HIGH_FEE = 800
MED_FEE = 400
LOW_FEE = 200

TEST_MSG = "/testdata.TestMsg"
RECV = "/ibc.core.channel.v1.MsgRecvPacket"
ACK = "/ibc.core.channel.v1.MsgAcknowledgement"
TIMEOUT = "/ibc.core.channel.v1.MsgTimeout"
DELEGATE = "/cosmos.staking.v1beta1.MsgDelegate"

MIN_EMPTY = []
GF_EMPTY = []
GF0 = [DecCoin("photon", 0), DecCoin("uatom", 0)]
GF_CONTAIN0 = [DecCoin("photon", MED), DecCoin("uatom", 0)]
MIN0 = [DecCoin("stake", 0), DecCoin("uatom", 0)]
GF_HIGH = [DecCoin("uatom", HIGH)]
MIN = [DecCoin("uatom", MED), DecCoin("stake", MED)]
GF_LOW = [DecCoin("uatom", LOW)]
GF_NEW = [DecCoin("photon", HIGH), DecCoin("quark", HIGH)]


def _accept(value):
    return None


def _setup(min_gas_prices, params, check_tx=True):
    global_subspace = Subspace(MODULE_NAME, param_key_table())
    global_subspace.set_param_set(params)
    staking = Subspace("staking", {KEY_BOND_DENOM: _accept})
    staking.set(KEY_BOND_DENOM, BOND_DENOM)
    decorator = FeeDecorator(global_subspace, staking)
    return decorator, Context(min_gas_prices=min_gas_prices, is_check_tx=check_tx)


def _params(global_fee):
    return Params(
        minimum_gas_prices=list(global_fee),
        bypass_min_fee_msg_types=list(DEFAULT_BYPASS_MIN_FEE_MSG_TYPES),
        max_total_bypass_min_fee_msg_gas_usage=DEFAULT_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE,
    )


def _next(ctx, tx, simulate):
    return ctx


def c(denom, amount):
    return Coin(denom, amount)


def test_default_zero_global_fee_uses_bond_denom():
    decorator, _ = _setup([], Params())
    fees = decorator.default_zero_global_fee()
    assert fees == [DecCoin(BOND_DENOM, 0)]


CASES = [
    ("empty min, global high, fee high", MIN_EMPTY, GF_HIGH, [c("uatom", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("empty min, global high, fee low", MIN_EMPTY, GF_HIGH, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("min with default denom, empty global, fee med", MIN, GF_EMPTY, [c("uatom", MED_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("min with default denom, empty global, fee low", MIN, GF_EMPTY, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("empty min, empty global, empty fee", MIN_EMPTY, GF_EMPTY, [], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, zero global, zero fee in global denom", MIN0, GF0, [c("uatom", 0), c("photon", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, zero global, empty fee", MIN0, GF0, [], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, zero global, zero fee not in global denom", MIN0, GF0, [c("stake", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, zero global, zero fees one in one not", MIN0, GF0, [c("stake", 0), c("uatom", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, empty global, zero fee in min denom", MIN0, GF_EMPTY, [c("stake", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, empty global, zero fee in other denom", MIN0, GF_EMPTY, [c("quark", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, empty global, zero fee in default denom", MIN0, GF_EMPTY, [c("uatom", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, empty global, nonzero fee in default denom", MIN0, GF_EMPTY, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("zero min, empty global, nonzero fee not in default denom", MIN0, GF_EMPTY, [c("quark", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("empty min, zero global, zero fee in global denom", MIN_EMPTY, GF0, [c("uatom", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("empty min, zero global, zero fee not in global denom", MIN_EMPTY, GF0, [c("stake", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("empty min, zero global, nonzero fee in global denom", MIN_EMPTY, GF0, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("empty min, zero global, nonzero fee not in global denom", MIN_EMPTY, GF0, [c("stake", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("zero min, nonzero global, fee meets global", MIN0, GF_LOW, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("fee above global and min", MIN, GF_HIGH, [c("uatom", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("fee below global and min", MIN, GF_HIGH, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("one denom high one low", MIN, GF_NEW, [c("photon", LOW_FEE), c("quark", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("global above min, fee between", MIN, GF_HIGH, [c("uatom", MED_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("global below min, fee between", MIN, GF_LOW, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("nonzero min, zero global, fee below min", MIN, GF0, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("nonzero min, zero global, fee meets min", MIN, GF0, [c("uatom", MED_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("nonzero min, zero global, fee in min-only denom", MIN, GF0, [c("stake", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("min denom not in global, pay global denom", MIN, GF_NEW, [c("photon", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("min denom not in global, pay min denom", MIN, GF_NEW, [c("stake", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("fees contain denom not in global", MIN, GF_LOW, [c("uatom", HIGH_FEE), c("quark", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("fees contain zero denom not in global", MIN, GF_LOW, [c("uatom", HIGH_FEE), c("quark", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("global zero and nonzero, fee below nonzero", MIN0, GF_CONTAIN0, [c("photon", LOW_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("global zero, fee zero same denom and low other", MIN0, GF_CONTAIN0, [c("photon", LOW_FEE), c("uatom", 0)], GAS_LIMIT, TEST_MSG, True, True),
    ("global zero, empty fee", MIN0, GF_CONTAIN0, [], GAS_LIMIT, TEST_MSG, True, False),
    ("global zero, fee in zero denom and low nonzero", MIN0, GF_CONTAIN0, [c("photon", LOW_FEE), c("uatom", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("global zero, all zero fees in global denoms", MIN0, GF_CONTAIN0, [c("photon", 0), c("uatom", 0)], GAS_LIMIT, TEST_MSG, True, False),
    ("global zero, fee above nonzero", MIN0, GF_CONTAIN0, [c("photon", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("bypass recv packet", MIN, GF_LOW, [c("uatom", 0)], GAS_LIMIT, RECV, True, False),
    ("bypass timeout", MIN, GF_LOW, [c("uatom", 0)], GAS_LIMIT, TIMEOUT, True, False),
    ("bypass timeout again", MIN, GF_LOW, [c("uatom", 0)], GAS_LIMIT, TIMEOUT, True, False),
    ("bypass gas exceeds max", MIN, GF_LOW, [c("uatom", 0)], 2 * DEFAULT_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE, TIMEOUT, True, True),
    ("bypass gas equals max", MIN, GF_LOW, [c("uatom", 0)], DEFAULT_MAX_TOTAL_BYPASS_MIN_FEE_MSG_GAS_USAGE, TIMEOUT, True, False),
    ("ibc, zero fee not in global denom", MIN, GF_LOW, [c("photon", 0)], GAS_LIMIT, RECV, True, False),
    ("ibc, nonzero fee in global denom", MIN, GF_LOW, [c("uatom", HIGH_FEE)], GAS_LIMIT, RECV, True, False),
    ("ibc, nonzero fee not in global denom", MIN, GF_LOW, [c("photon", HIGH_FEE)], GAS_LIMIT, RECV, True, True),
    ("ibc, empty fee", MIN, GF_LOW, [], GAS_LIMIT, RECV, True, False),
    ("non-ibc, nonzero fee in global denom", MIN, GF_LOW, [c("uatom", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, False),
    ("non-ibc, empty fee", MIN, GF_LOW, [], GAS_LIMIT, TEST_MSG, True, True),
    ("non-ibc, nonzero fee not in global denom", MIN, GF_LOW, [c("photon", HIGH_FEE)], GAS_LIMIT, TEST_MSG, True, True),
    ("deliver, fee low", MIN, GF_LOW, [c("uatom", LOW_FEE)], GAS_LIMIT, TEST_MSG, False, False),
    ("deliver, fee zero", MIN, GF_LOW, [c("uatom", 0)], GAS_LIMIT, TEST_MSG, False, True),
    ("deliver, fee denom not in global", MIN, GF_LOW, [c("quark", 0)], GAS_LIMIT, TEST_MSG, False, True),
]


@pytest.mark.parametrize(
    "name, min_gas, global_fee, fee, gas, msg, check_tx, exp_err",
    CASES,
    ids=[case[0] for case in CASES],
)
def test_ante_handle(name, min_gas, global_fee, fee, gas, msg, check_tx, exp_err):
    decorator, ctx = _setup(min_gas, _params(global_fee), check_tx)
    tx = FeeTx(fee=new_coins(*fee), gas=gas, msgs=[msg])
    if exp_err:
        with pytest.raises(FeeError):
            decorator.ante_handle(ctx, tx, False, _next)
    else:
        assert decorator.ante_handle(ctx, tx, False, _next) is ctx


def test_ante_handle_too_many_denoms_is_invalid_coins():
    decorator, ctx = _setup(MIN, _params(GF_LOW), True)
    tx = FeeTx(fee=new_coins(c("uatom", HIGH_FEE), c("quark", HIGH_FEE)), gas=GAS_LIMIT, msgs=[TEST_MSG])
    with pytest.raises(InvalidCoinsError):
        decorator.ante_handle(ctx, tx, False, _next)


def test_ante_handle_bypass_gas_exceeded_message():
    decorator, ctx = _setup(MIN, _params(GF_LOW), True)
    tx = FeeTx(fee=new_coins(c("uatom", 1)), gas=2_000_000, msgs=[TIMEOUT])
    with pytest.raises(InsufficientFeeError, match="exceeds the maximum allowed gas value of 1000000"):
        decorator.ante_handle(ctx, tx, False, _next)


def test_ante_handle_simulation_skips_checks():
    decorator, ctx = _setup(MIN, _params(GF_LOW), True)
    tx = FeeTx(fee=Coins(), gas=GAS_LIMIT, msgs=[TEST_MSG])
    assert decorator.ante_handle(ctx, tx, True, _next) is ctx


def test_ante_handle_rejects_non_fee_tx():
    decorator, ctx = _setup(MIN, _params(GF_LOW), True)
    with pytest.raises(TypeError):
        decorator.ante_handle(ctx, object(), False, _next)


def test_decorator_requires_key_tables():
    with pytest.raises(ValueError, match="global fee paramspace"):
        FeeDecorator(Subspace(MODULE_NAME), Subspace("staking", {}))
    with pytest.raises(ValueError, match="staking paramspace"):
        FeeDecorator(Subspace(MODULE_NAME, param_key_table()), Subspace("staking"))


@pytest.mark.parametrize(
    "min_gas, gas_limit, expected",
    [
        ([], 1000, Coins()),
        ([DecCoin("stake", 0), DecCoin("uatom", 0)], 1000, Coins()),
        (
            [DecCoin("stake", 0), DecCoin("uatom", 1)],
            1000,
            Coins([Coin("stake", 0), Coin("uatom", 1000)]),
        ),
        (
            [DecCoin("uatom", 3), DecCoin("photon", 2)],
            1000,
            Coins([Coin("photon", 2000), Coin("uatom", 3000)]),
        ),
        (
            [DecCoin("photon", 2), DecCoin("uatom", 3)],
            1000,
            Coins([Coin("photon", 2000), Coin("uatom", 3000)]),
        ),
    ],
)
def test_get_min_gas_price(min_gas, gas_limit, expected):
    _, ctx = _setup(min_gas, Params())
    assert get_min_gas_price(ctx, gas_limit) == expected


def test_get_min_gas_price_rounds_up():
    ctx = Context(min_gas_prices=[DecCoin("uatom", Decimal("0.001"))])
    assert get_min_gas_price(ctx, 1500) == Coins([Coin("uatom", 2)])


@pytest.mark.parametrize(
    "msgs, expected",
    [
        ([], True),
        ([RECV, ACK], True),
        ([RECV, DELEGATE], False),
        ([DELEGATE], False),
    ],
)
def test_contains_only_bypass_min_fee_msgs(msgs, expected):
    decorator, _ = _setup([], _params([]))
    assert decorator.contains_only_bypass_min_fee_msgs(msgs) is expected


def test_get_tx_fee_required():
    params = Params(minimum_gas_prices=[])
    decorator, ctx = _setup([], params)
    without_bond = FeeDecorator(decorator.global_min_fee, decorator.global_min_fee)
    tx = FeeTx(fee=new_coins(c("uatom", 0)), gas=1, msgs=[TEST_MSG])
    with pytest.raises(FeeError, match="empty staking bond denomination"):
        without_bond.get_tx_fee_required(ctx, tx)

    local = new_coins(c("uatom", 1))
    decorator, ctx = _setup([DecCoin("uatom", 1)], params)
    assert ctx.is_check_tx
    assert decorator.get_tx_fee_required(ctx, tx) == local

    global_fee = decorator.get_global_fee(tx)
    assert global_fee == Coins([Coin("uatom", 0)])
    deliver = Context(min_gas_prices=ctx.min_gas_prices, is_check_tx=False)
    assert decorator.get_tx_fee_required(deliver, tx) == global_fee


def test_params_getters_default_when_unset():
    decorator, _ = _setup([], Params())
    assert decorator.get_bypass_msg_types() == []
    assert decorator.get_max_total_bypass_min_fee_msg_gas_usage() == 0
    decorator, _ = _setup([], _params([]))
    assert decorator.get_bypass_msg_types() == list(DEFAULT_BYPASS_MIN_FEE_MSG_TYPES)
    assert decorator.get_max_total_bypass_min_fee_msg_gas_usage() == 1_000_000