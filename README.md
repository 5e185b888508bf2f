# gaiafee

`gaiafee` decides whether a transaction pays enough fee under a chain-wide
("global") minimum fee and a node's local minimum gas prices. It also converts
bech32 addresses from one human-readable prefix to another. It has no
dependencies beyond the standard library.

## Installation

```
pip install .
```

## Modules

- `gaiafee.coins`: `Coin` (integer amount), `DecCoin` (decimal amount, such
  as a gas price) and `Coins`, an immutable ordered collection with
  `sorted()`, `is_zero()`, `amount_of()`, `denoms_subset_of()`,
  `is_any_gte()` and `is_any_gt()`. `validate_denom()` raises `ValueError`
  for a bad denomination; `new_coins()` drops zero coins, sorts by
  denomination and rejects negative amounts and duplicates.
- `gaiafee.bech32`: `bech32_encode()`, `bech32_decode()`,
  `decode_and_convert()`, `convert_and_encode()` and
  `convert_bech32_prefix()`. Failures raise `Bech32Error`.
- `gaiafee.params`: `Params`, `default_params()`, the validators
  `validate_minimum_gas_prices()`, `validate_bypass_min_fee_msg_types()`,
  `validate_max_total_bypass_min_fee_msg_gas_usage()` and
  `validate_dec_coins()`, `GenesisState`, `default_genesis_state()`,
  `validate_genesis()`, `genesis_state_from_app_state()`, and `Subspace`, an
  in-memory parameter store. Invalid data raises `ParamsError`.
- `gaiafee.fee_utils`: `contain_zero_coins()`, `find()`,
  `combined_fee_requirement()`, `split_coins_by_denoms()` and
  `non_zero_fees()`.
- `gaiafee.ante`: `Context`, `FeeTx`, `FeeDecorator`, `get_min_gas_price()`
  and the errors `InsufficientFeeError` and `InvalidCoinsError` (both
  subclasses of `FeeError`).
- `gaiafee.module`: `GlobalFeeModule`, `GrpcQuerier` and
  `QueryParamsResponse`.
- `gaiafee.cli`: the `gaiafee` command.

## Converting an address prefix

```python
from gaiafee.bech32 import convert_bech32_prefix

convert_bech32_prefix("akash1a6zlyvpnksx8wr6wz8wemur2xe8zyh0ytz6d88", "cosmos")
# 'cosmos1a6zlyvpnksx8wr6wz8wemur2xe8zyh0yxeh27a'
```

An address that cannot be decoded raises `Bech32Error`, for example
`cannot decode invalidaddress address: decoding bech32 failed: invalid separator index -1`.

On the command line:

```
gaiafee debug bech32-convert akash1a6zlyvpnksx8wr6wz8wemur2xe8zyh0ytz6d88
gaiafee debug bech32-convert stride1673f0t8p893rqyqe420mgwwz92ac4qv6synvx2 --prefix osmo
```

`--prefix` (`-p`) defaults to `cosmos`. The converted address is written to
standard error. On failure the command prints `Error: ...` and exits with
status 1.

## Parameters

`default_params()` gives no minimum gas prices, the five IBC relayer message
types (`MsgRecvPacket`, `MsgAcknowledgement`, `MsgUpdateClient`, `MsgTimeout`,
`MsgTimeoutOnClose`) as bypass types, and a bypass gas ceiling of 1,000,000.

```python
from gaiafee.params import default_params

params = default_params()
params.validate_basic()   # raises ParamsError when invalid
params.to_dict()
```

Minimum gas prices must be `DecCoin`s sorted by denomination, free of
duplicates, with valid denominations and non-negative amounts. Bypass message
types must be non-empty type URLs starting with `/`. The gas ceiling must be
an integer between 0 and 2**64 - 1.

## Checking a transaction's fee

```python
from gaiafee.ante import KEY_BOND_DENOM, Context, FeeDecorator, FeeTx
from gaiafee.coins import Coin, DecCoin, new_coins
from gaiafee.params import Subspace, default_params, param_key_table

global_fee = Subspace("globalfee", param_key_table())
global_fee.set_param_set(default_params())

staking = Subspace("staking", {KEY_BOND_DENOM: lambda value: None})
staking.set(KEY_BOND_DENOM, "uatom")

decorator = FeeDecorator(global_fee, staking)
ctx = Context(min_gas_prices=[DecCoin("uatom", "0.002")], is_check_tx=True)
tx = FeeTx(fee=new_coins(Coin("uatom", 400)), gas=200_000,
           msgs=["/cosmos.bank.v1beta1.MsgSend"])

decorator.ante_handle(ctx, tx, False, lambda ctx, tx, simulate: "accepted")
# 'accepted'
```

How the requirement is formed:

- Each required amount is `ceil(gas price * gas limit)`.
- With no global minimum gas prices stored, the global fee is a zero coin in
  the staking bond denomination; if that denomination is unset,
  `FeeError("empty staking bond denomination")` is raised.
- In check mode (`is_check_tx=True`) the local minimum gas prices are combined
  with the global fee: for each global denomination the larger amount wins,
  and local-only denominations are ignored. Otherwise only the global fee
  applies.

`ante_handle` then:

- passes straight on when `simulate` is true;
- raises `InvalidCoinsError` when the fee has more denominations than the
  requirement, and `InsufficientFeeError` when it pays in a denomination that
  is not required;
- lets the transaction through when every message is a bypass type and the
  gas limit does not exceed the bypass ceiling;
- otherwise accepts an empty fee only if some required coin is zero, accepts a
  fee that includes a zero-required denomination, and otherwise requires at
  least one required denomination to be paid in full, raising
  `InsufficientFeeError` if none is.

Messages are given as type URL strings.

## The module and its query

```python
from gaiafee.module import GlobalFeeModule
from gaiafee.params import Subspace

module = GlobalFeeModule(Subspace("globalfee"))
module.validate_genesis(module.default_genesis())
module.init_genesis(module.default_genesis())
module.export_genesis()        # genesis JSON of the stored parameters
module.querier().params()      # QueryParamsResponse
```

`GlobalFeeModule` installs the parameter key table on a subspace that has
none. `validate_genesis` and `init_genesis` accept JSON text or bytes; unset
fields take empty or zero values. `export_genesis` raises `KeyError` if the
parameters were never stored. The querier reports unset parameters as empty
or zero. `consensus_version()` is 1.

## What it does not do

`gaiafee` is a library of fee rules and a prefix converter. It does not run a
node, sign or broadcast transactions, keep keys, or persist state: `Subspace`
lives in memory only, and `GrpcQuerier` is a plain object, not a network
service. The only command is `gaiafee debug bech32-convert`.

## Running the tests

```
pip install .[test]
pytest
```