"""presaleswap - SOV to ZERO presale swap orchestration on RSK."""

__version__ = "0.1.0"
