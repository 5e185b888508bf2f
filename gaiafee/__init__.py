"""Global minimum fee rules, fee parameters and bech32 address prefix conversion."""

__version__ = "0.1.0"