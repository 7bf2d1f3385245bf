import pytest
from ethereum_types.numeric import U256

from ethereum_provider import Contract, Provider
from ethereum_provider.account_types import Address
from ethereum_provider.utils.numeric import to_wei

from .helpers import ALICE, BOB, COUNTER_ABI, COUNTER_BYTECODE


@pytest.fixture
def provider() -> Provider:
    return Provider()


@pytest.fixture
def alice(provider: Provider) -> Address:
    provider.create_account(ALICE, to_wei(1))
    return ALICE


@pytest.fixture
def bob(provider: Provider) -> Address:
    provider.create_account(BOB, U256(0))
    return BOB


@pytest.fixture
def counter(provider: Provider, alice: Address) -> Contract:
    contract = Contract.from_abi(COUNTER_ABI, COUNTER_BYTECODE)
    address, _ = contract.deploy(provider, alice)
    return contract.at(address)
