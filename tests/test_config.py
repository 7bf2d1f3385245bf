import pytest
from ethereum.cancun.vm.instructions import Ops
from ethereum_types.numeric import U64, U256, Uint
from pydantic import ValidationError

from ethereum_provider import Provider, ProviderConfig, Transaction
from ethereum_provider.exceptions import EngineError

from .helpers import ALICE, assemble, deployment_code, return_top


def test_defaults() -> None:
    config = ProviderConfig()
    assert config.chain_id == 1
    assert config.gas_price == 0
    assert config.default_gas_limit == 30_000_000
    assert config.block_gas_limit == 30_000_000


def test_block_environment() -> None:
    config = ProviderConfig(
        chain_id=5,
        block_number=100,
        timestamp=1_700_000_000,
        coinbase="0x" + "ab" * 20,
        prev_randao=7,
        gas_price=3,
    )
    block = config.block_environment()
    assert block.chain_id == U64(5)
    assert block.number == Uint(100)
    assert block.time == U256(1_700_000_000)
    assert block.coinbase == b"\xab" * 20
    assert block.prev_randao == (7).to_bytes(32, "big")
    assert block.gas_price == Uint(3)


@pytest.mark.parametrize(
    "overrides",
    [
        {"chain_id": -1},
        {"gas_price": -1},
        {"block_number": -1},
        {"chain_id": 2**64},
        {"coinbase": "0x1234"},
        {"coinbase": "ab" * 20},
        {"default_gas_limit": 40_000_000},
    ],
)
def test_invalid_values(overrides) -> None:
    with pytest.raises(ValidationError):
        ProviderConfig(**overrides)


def test_config_is_frozen() -> None:
    config = ProviderConfig()
    with pytest.raises(ValidationError):
        config.gas_price = 1  # type: ignore[misc]


def test_fields_are_documented() -> None:
    fields = ProviderConfig.model_fields
    assert fields["gas_price"].description is not None


def test_chain_id_reaches_the_engine() -> None:
    provider = Provider(ProviderConfig(chain_id=1337))
    provider.create_account(ALICE)
    created, _ = provider.execute(
        Transaction(
            sender=ALICE,
            data=deployment_code(assemble(Ops.CHAINID, *return_top())),
        )
    )
    assert created is not None
    _, result = provider.execute(Transaction(sender=ALICE, to=created))
    assert int.from_bytes(result.return_data, "big") == 1337


def test_default_gas_limit_is_applied() -> None:
    provider = Provider(ProviderConfig(default_gas_limit=21_000))
    provider.create_account(ALICE)
    _, result = provider.execute(Transaction(sender=ALICE, to=ALICE))
    assert result.gas_used == 21_000

    # A deployment costs more than 21000 gas up front.
    with pytest.raises(EngineError):
        provider.execute(
            Transaction(sender=ALICE, data=deployment_code(b"\x00"))
        )
