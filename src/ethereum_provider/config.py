"""
Provider configuration.

Classes:
- ProviderConfig: chain and block parameters every transaction runs with.
"""

from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U64, U256, Uint
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .engine import BlockEnvironment
from .utils.hexadecimal import hex_to_address


class ProviderConfig(BaseModel):
    """Chain and block parameters used by a `Provider`."""

    model_config = ConfigDict(frozen=True, use_attribute_docstrings=True)

    chain_id: int = Field(default=1, ge=0, lt=2**64)
    """The chain id reported by `CHAINID`."""

    gas_price: int = Field(default=0, ge=0)
    """Price of one unit of gas, in wei. Zero makes execution free."""

    default_gas_limit: int = Field(default=30_000_000, ge=0)
    """Gas limit for transactions that do not specify one."""

    block_gas_limit: int = Field(default=30_000_000, ge=0)
    """Upper bound for the gas limit of any single transaction."""

    block_number: int = Field(default=1, ge=0)
    """The block number reported by `NUMBER`."""

    timestamp: int = Field(default=0, ge=0)
    """The block timestamp reported by `TIMESTAMP`."""

    coinbase: str = Field(
        default="0x" + "00" * 20, pattern=r"^0x[0-9a-fA-F]{40}$"
    )
    """The block beneficiary reported by `COINBASE`, as a hex string."""

    prev_randao: int = Field(default=0, ge=0, lt=2**256)
    """The value reported by `PREVRANDAO`."""

    base_fee: int = Field(default=0, ge=0)
    """The value reported by `BASEFEE`."""

    @model_validator(mode="after")
    def check_gas_limits(self) -> "ProviderConfig":
        """
        The default gas limit has to fit in a block.
        """
        if self.default_gas_limit > self.block_gas_limit:
            raise ValueError(
                "default_gas_limit must not exceed block_gas_limit"
            )
        return self

    def block_environment(self) -> BlockEnvironment:
        """
        The block every transaction sent through the provider executes in.
        """
        return BlockEnvironment(
            coinbase=hex_to_address(self.coinbase),
            number=Uint(self.block_number),
            time=U256(self.timestamp),
            gas_limit=Uint(self.block_gas_limit),
            base_fee_per_gas=Uint(self.base_fee),
            prev_randao=Bytes32(self.prev_randao.to_bytes(32, "big")),
            chain_id=U64(self.chain_id),
            gas_price=Uint(self.gas_price),
        )
