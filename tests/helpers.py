from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ethereum.cancun.vm.instructions import Ops
from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256

from ethereum_provider.abi.codec import ERROR_SELECTOR, encode
from ethereum_provider.abi.types import parse_type
from ethereum_provider.account_types import Account, Address
from ethereum_provider.crypto import keccak256
from ethereum_provider.utils.address import address_from_low_u64_be

ALICE = address_from_low_u64_be(0xA11CE)
BOB = address_from_low_u64_be(0xB0B)


@dataclass(frozen=True)
class Push:
    """Push `value`, in `size` bytes (the fewest that fit by default)."""

    value: int
    size: Optional[int] = None


@dataclass(frozen=True)
class Label:
    """Marks a `JUMPDEST`; emits the opcode."""

    name: str


@dataclass(frozen=True)
class PushLabel:
    """Push the offset of a label, always as `PUSH2`."""

    name: str


Item = Union[Ops, Push, Label, PushLabel, bytes, int]


def _push(value: int, size: Optional[int]) -> bytes:
    if size is None:
        size = max(1, (value.bit_length() + 7) // 8)
    return bytes([Ops.PUSH1.value + size - 1]) + value.to_bytes(size, "big")


def _emit(item: Item, labels: Dict[str, int]) -> bytes:
    if isinstance(item, Ops):
        return bytes([item.value])
    if isinstance(item, Push):
        return _push(item.value, item.size)
    if isinstance(item, Label):
        return bytes([Ops.JUMPDEST.value])
    if isinstance(item, PushLabel):
        return _push(labels.get(item.name, 0), 2)
    if isinstance(item, int):
        return bytes([item])
    return bytes(item)


def assemble(*items: Item) -> Bytes:
    """
    Assemble EVM code. Labels may be referenced before they are defined.
    """
    labels: Dict[str, int] = {}
    offset = 0
    for item in items:
        if isinstance(item, Label):
            labels[item.name] = offset
        offset += len(_emit(item, labels))
    return b"".join(_emit(item, labels) for item in items)


def return_top() -> List[Item]:
    """Return the top of the stack as a 32 byte word."""
    return [Push(0), Ops.MSTORE, Push(32), Push(0), Ops.RETURN]


def store_bytes(data: bytes) -> List[Item]:
    """Write `data` into memory starting at offset zero."""
    items: List[Item] = []
    for start in range(0, len(data), 32):
        chunk = data[start : start + 32].ljust(32, b"\x00")
        items += [Push(int.from_bytes(chunk, "big"), 32), Push(start)]
        items.append(Ops.MSTORE)
    return items


def revert_with(data: bytes) -> List[Item]:
    return store_bytes(data) + [Push(len(data)), Push(0), Ops.REVERT]


def error_payload(message: str) -> bytes:
    return ERROR_SELECTOR + encode([parse_type("string")], [message])


def selector(signature: str) -> int:
    return int.from_bytes(keccak256(signature.encode())[:4], "big")


def deployment_code(
    runtime: Bytes, constructor: Sequence[Item] = ()
) -> Bytes:
    """
    Init code that runs `constructor` and then returns `runtime` as the
    code of the new contract.
    """

    def prefix(offset: int) -> Bytes:
        return assemble(
            *constructor,
            Push(len(runtime), 2),
            Push(offset, 2),
            Push(0),
            Ops.CODECOPY,
            Push(len(runtime), 2),
            Push(0),
            Ops.RETURN,
        )

    offset = len(prefix(0))
    return prefix(offset) + runtime


class DictStateView:
    """A `StateView` backed by plain dictionaries."""

    def __init__(
        self,
        accounts: Optional[Dict[Address, Account]] = None,
        storage: Optional[Dict[Address, Dict[Bytes32, U256]]] = None,
    ) -> None:
        self.accounts_by_address = accounts or {}
        self.slots = storage or {}

    def get_account(self, address: Address) -> Optional[Account]:
        return self.accounts_by_address.get(address)

    def get_storage(self, address: Address, key: Bytes32) -> U256:
        return self.slots.get(address, {}).get(key, U256(0))

    def accounts(self) -> Iterable[Tuple[Address, Account]]:
        return self.accounts_by_address.items()

    def storage(self, address: Address) -> Iterable[Tuple[Bytes32, U256]]:
        return self.slots.get(address, {}).items()


NUMBER_SET_EVENT = "NumberSet(address,uint32)"

COUNTER_ABI = [
    "function number() view returns (uint32)",
    "function setNumber(uint32 value)",
    "function increment()",
    "function fail()",
    "event NumberSet(address indexed setter, uint32 value)",
]


def _dispatch(signature: str, label: str) -> List[Item]:
    return [
        Ops.DUP1,
        Push(selector(signature), 4),
        Ops.EQ,
        PushLabel(label),
        Ops.JUMPI,
    ]


COUNTER_RUNTIME = assemble(
    Push(0),
    Ops.CALLDATALOAD,
    Push(0xE0),
    Ops.SHR,
    *_dispatch("number()", "number"),
    *_dispatch("setNumber(uint32)", "set_number"),
    *_dispatch("increment()", "increment"),
    *_dispatch("fail()", "fail"),
    Push(0),
    Ops.DUP1,
    Ops.REVERT,
    # number()
    Label("number"),
    Push(0),
    Ops.SLOAD,
    *return_top(),
    # setNumber(uint32)
    Label("set_number"),
    Push(4),
    Ops.CALLDATALOAD,
    Ops.DUP1,
    Push(0),
    Ops.SSTORE,
    Push(0),
    Ops.MSTORE,
    Ops.CALLER,
    Push(int.from_bytes(keccak256(NUMBER_SET_EVENT.encode()), "big"), 32),
    Push(32),
    Push(0),
    Ops.LOG2,
    Ops.STOP,
    # increment()
    Label("increment"),
    Push(0),
    Ops.SLOAD,
    Push(1),
    Ops.ADD,
    Push(0),
    Ops.SSTORE,
    Ops.STOP,
    # fail()
    Label("fail"),
    *revert_with(error_payload("nope")),
)

COUNTER_BYTECODE = deployment_code(COUNTER_RUNTIME)

# Stores its single uint256 constructor argument in slot 0.
STORE_ARGUMENT_CONSTRUCTOR: List[Item] = [
    Push(32),
    Push(32),
    Ops.CODESIZE,
    Ops.SUB,
    Push(0),
    Ops.CODECOPY,
    Push(0),
    Ops.MLOAD,
    Push(0),
    Ops.SSTORE,
]
