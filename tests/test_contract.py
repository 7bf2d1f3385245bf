import pytest
from ethereum_types.numeric import U256, Uint

from ethereum_provider import Contract, ContractMetadata, Provider
from ethereum_provider.abi.codec import encode
from ethereum_provider.abi.types import parse_type
from ethereum_provider.exceptions import (
    ArityMismatch,
    EngineError,
    InsufficientFunds,
    MissingAddress,
    UnknownMember,
    UnsupportedType,
)
from ethereum_provider.utils.numeric import to_wei

from .helpers import (
    ALICE,
    BOB,
    COUNTER_ABI,
    COUNTER_BYTECODE,
    COUNTER_RUNTIME,
    STORE_ARGUMENT_CONSTRUCTOR,
    Push,
    assemble,
    deployment_code,
    revert_with,
    selector,
)


def test_counter(provider: Provider, counter: Contract) -> None:
    value, _, _ = counter.call(provider, "number", caller=ALICE)
    assert value == 0

    _, gas_used, logs = counter.send(
        provider, "setNumber", [5], caller=ALICE
    )
    assert gas_used > Uint(21000)
    assert len(logs) == 1

    value, _, _ = counter.call(provider, "number", caller=ALICE)
    assert value == 5

    counter.send(provider, "increment", caller=ALICE)
    value, _, _ = counter.call(provider, "number", caller=ALICE)
    assert value == 6


def test_deploy_returns_address(provider: Provider, alice) -> None:
    contract = Contract.from_abi(COUNTER_ABI, COUNTER_BYTECODE)
    address, gas_used = contract.deploy(provider, alice)
    assert contract.address is None
    assert gas_used > Uint(53000)
    assert provider.view_account(address).code == COUNTER_RUNTIME


def test_one_binding_deploys_many_contracts(
    provider: Provider, alice
) -> None:
    template = Contract.from_abi(COUNTER_ABI, COUNTER_BYTECODE)
    first, _ = template.deploy(provider, alice)
    second, _ = template.deploy(provider, alice)
    assert first != second
    assert template.address is None

    template.at(first).send(provider, "setNumber", [3], caller=ALICE)
    value, _, _ = template.at(second).call(provider, "number", caller=ALICE)
    assert value == 0


def test_call_does_not_commit(provider: Provider, counter: Contract) -> None:
    nonce = provider.view_account(ALICE).nonce
    _, _, logs = counter.call(provider, "setNumber", [9], caller=ALICE)
    assert len(logs) == 1
    value, _, _ = counter.call(provider, "number", caller=ALICE)
    assert value == 0
    assert provider.view_account(ALICE).nonce == nonce


def test_decode_logs(provider: Provider, counter: Contract) -> None:
    _, _, logs = counter.send(provider, "setNumber", [7], caller=ALICE)
    events = counter.decode_logs(logs)
    assert len(events) == 1
    event = events[0]
    assert event.name == "NumberSet"
    assert event.address == counter.address
    assert event.args == {"setter": ALICE, "value": 7}
    assert event.values == (ALICE, 7)


def test_decode_logs_skips_other_contracts(
    provider: Provider, counter: Contract
) -> None:
    _, _, logs = counter.send(provider, "setNumber", [7], caller=ALICE)
    other = counter.at(BOB)
    assert other.decode_logs(logs) == []
    assert counter.decode_logs([]) == []


def test_decode_logs_skips_same_topic_with_other_layout(
    provider: Provider, counter: Contract
) -> None:
    _, _, logs = counter.send(provider, "setNumber", [7], caller=ALICE)
    # Same signature hash, but `setter` is not indexed here.
    lookalike = Contract.from_abi(
        ["event NumberSet(address setter, uint32 value)"]
    ).at(counter.address)
    assert lookalike.decode_logs(logs) == []


def test_unknown_function(provider: Provider, counter: Contract) -> None:
    with pytest.raises(UnknownMember):
        counter.call(provider, "missing", caller=ALICE)


def test_wrong_argument_type(provider: Provider, counter: Contract) -> None:
    with pytest.raises(UnsupportedType):
        counter.send(provider, "setNumber", ["five"], caller=ALICE)
    with pytest.raises(UnsupportedType):
        counter.send(provider, "setNumber", [2**32], caller=ALICE)


def test_wrong_argument_count(provider: Provider, counter: Contract) -> None:
    with pytest.raises(ArityMismatch):
        counter.send(provider, "setNumber", [1, 2], caller=ALICE)
    assert provider.view_account(ALICE).nonce == 1


def test_revert_reason(provider: Provider, counter: Contract) -> None:
    nonce = provider.view_account(ALICE).nonce
    with pytest.raises(EngineError) as info:
        counter.send(provider, "fail", caller=ALICE)
    assert info.value.revert_reason == "nope"
    assert "nope" in str(info.value)
    assert info.value.gas_used is not None
    assert provider.view_account(ALICE).nonce == nonce


def test_unknown_selector_reverts_without_reason(
    provider: Provider, counter: Contract
) -> None:
    other = Contract.from_abi(["function other()"]).at(counter.address)
    with pytest.raises(EngineError) as info:
        other.call(provider, "other", caller=ALICE)
    assert info.value.revert_reason is None


def test_missing_address(provider: Provider, alice) -> None:
    contract = Contract.from_abi(COUNTER_ABI)
    with pytest.raises(MissingAddress):
        contract.call(provider, "number", caller=ALICE)


def test_at_returns_a_new_binding(counter: Contract) -> None:
    other = counter.at(BOB)
    assert other.address == BOB
    assert other.metadata is counter.metadata
    assert counter.address != BOB


def test_constructor_arguments(provider: Provider, alice) -> None:
    bytecode = deployment_code(COUNTER_RUNTIME, STORE_ARGUMENT_CONSTRUCTOR)
    contract = Contract.from_abi(
        COUNTER_ABI + ["constructor(uint256 initial)"], bytecode
    )
    address, _ = contract.deploy(provider, alice, args=[41])
    value, _, _ = contract.at(address).call(provider, "number", caller=ALICE)
    assert value == 41


def test_constructor_arity(provider: Provider, alice) -> None:
    with_constructor = Contract.from_abi(
        COUNTER_ABI + ["constructor(uint256 initial)"], COUNTER_BYTECODE
    )
    with pytest.raises(ArityMismatch):
        with_constructor.deploy(provider, alice)

    without_constructor = Contract.from_abi(COUNTER_ABI, COUNTER_BYTECODE)
    with pytest.raises(ArityMismatch):
        without_constructor.deploy(provider, alice, args=[1])


def test_failed_deployment(provider: Provider, alice) -> None:
    contract = Contract.from_abi(
        COUNTER_ABI, assemble(*revert_with(b"bad init"))
    )
    with pytest.raises(EngineError):
        contract.deploy(provider, alice)
    assert contract.address is None


def test_custom_error_revert_reason(provider: Provider, alice) -> None:
    payload = (
        selector("TooLow(uint256)").to_bytes(4, "big")
        + encode([parse_type("uint256")], [3])
    )
    metadata = ContractMetadata.from_abi(
        ["function check()", "error TooLow(uint256 minimum)"],
        deployment_code(assemble(*revert_with(payload))),
    )
    address, _ = Contract(metadata).deploy(provider, alice)
    contract = Contract(metadata, address)
    with pytest.raises(EngineError) as info:
        contract.send(provider, "check", caller=ALICE)
    assert info.value.revert_reason == "TooLow(3)"


def test_send_value(provider: Provider, alice) -> None:
    # Accepts anything and stops.
    payable = Contract.from_abi(
        ["function deposit() payable"], deployment_code(assemble(Push(0)))
    )
    address, _ = payable.deploy(provider, alice)
    payable.at(address).send(
        provider, "deposit", caller=ALICE, value=U256(123)
    )
    assert provider.balance_of(address) == 123


def test_send_value_above_balance(provider: Provider, alice) -> None:
    payable = Contract.from_abi(
        ["function deposit() payable"], deployment_code(assemble(Push(0)))
    )
    address, _ = payable.deploy(provider, alice)
    before = provider.view_account(ALICE)
    with pytest.raises(InsufficientFunds):
        payable.at(address).send(
            provider, "deposit", caller=ALICE, value=U256(to_wei(2))
        )
    assert provider.view_account(ALICE) == before
    assert provider.balance_of(address) == 0
