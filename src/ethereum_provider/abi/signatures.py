"""
Function, event and error signatures declared by a contract ABI.
"""

from dataclasses import dataclass
from typing import Tuple

from eth_utils import (
    event_signature_to_log_topic,
    function_signature_to_4byte_selector,
)
from ethereum_types.bytes import Bytes4

from ..crypto import Hash32
from .types import AbiType


@dataclass(frozen=True)
class Parameter:
    """
    One named, typed input or output. `indexed` only matters for events.
    """

    name: str
    type: AbiType
    indexed: bool = False


def canonical_signature(name: str, inputs: Tuple[Parameter, ...]) -> str:
    """
    `name(type1,type2,...)`, the string hashed into selectors and topics.
    """
    return f"{name}({','.join(p.type.to_type_str() for p in inputs)})"


@dataclass(frozen=True)
class FunctionSignature:
    """
    A callable contract function.
    """

    name: str
    inputs: Tuple[Parameter, ...] = ()
    outputs: Tuple[Parameter, ...] = ()
    state_mutability: str = "nonpayable"

    @property
    def canonical(self) -> str:
        return canonical_signature(self.name, self.inputs)

    @property
    def selector(self) -> Bytes4:
        """
        First four bytes of the keccak256 hash of the canonical signature.
        """
        return Bytes4(function_signature_to_4byte_selector(self.canonical))

    @property
    def input_types(self) -> Tuple[AbiType, ...]:
        return tuple(p.type for p in self.inputs)

    @property
    def output_types(self) -> Tuple[AbiType, ...]:
        return tuple(p.type for p in self.outputs)

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in ("view", "pure")

    @property
    def is_payable(self) -> bool:
        return self.state_mutability == "payable"


@dataclass(frozen=True)
class EventSignature:
    """
    An event the contract may emit. Unless the event is anonymous, topic 0
    of its logs is `topic`.
    """

    name: str
    inputs: Tuple[Parameter, ...] = ()
    anonymous: bool = False

    @property
    def canonical(self) -> str:
        return canonical_signature(self.name, self.inputs)

    @property
    def topic(self) -> Hash32:
        return Hash32(event_signature_to_log_topic(self.canonical))

    @property
    def indexed_inputs(self) -> Tuple[Parameter, ...]:
        return tuple(p for p in self.inputs if p.indexed)

    @property
    def data_inputs(self) -> Tuple[Parameter, ...]:
        return tuple(p for p in self.inputs if not p.indexed)


@dataclass(frozen=True)
class ErrorSignature:
    """
    A custom error, raised by contracts with `revert Name(args)`.
    """

    name: str
    inputs: Tuple[Parameter, ...] = ()

    @property
    def canonical(self) -> str:
        return canonical_signature(self.name, self.inputs)

    @property
    def selector(self) -> Bytes4:
        return Bytes4(function_signature_to_4byte_selector(self.canonical))


@dataclass(frozen=True)
class ConstructorSignature:
    """
    Arguments taken by the contract's init code.
    """

    inputs: Tuple[Parameter, ...] = ()
    state_mutability: str = "nonpayable"

    @property
    def input_types(self) -> Tuple[AbiType, ...]:
        return tuple(p.type for p in self.inputs)
