"""
Contract Metadata
^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The ABI and deployment bytecode of a compiled contract, validated once at
load time and immutable afterwards.

Metadata is usually read from a build artifact, a JSON object holding an
`abi` list and the creation `bytecode` (either a hex string, or an object
with the hex string under `object`, as some toolchains emit it).
"""

import copy
import json
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ethereum_types.bytes import Bytes

from .abi.human import parse_abi
from .abi.signatures import (
    ConstructorSignature,
    ErrorSignature,
    EventSignature,
    FunctionSignature,
    Parameter,
)
from .abi.types import parse_type
from .crypto import Hash32
from .exceptions import (
    ArityMismatch,
    MalformedAbi,
    UnknownMember,
    UnsupportedType,
)
from .utils.hexadecimal import hex_to_bytes

AbiJson = List[Dict[str, Any]]

_ENTRY_KINDS = (
    "function",
    "event",
    "error",
    "constructor",
    "fallback",
    "receive",
)


def _type_string(parameter: Dict[str, Any]) -> str:
    type_string = parameter["type"]
    if not isinstance(type_string, str):
        raise MalformedAbi(f"parameter type must be a string: {parameter!r}")
    if type_string.startswith("tuple"):
        components = parameter.get("components")
        if not isinstance(components, list):
            raise MalformedAbi(
                f"tuple parameter without components: {parameter!r}"
            )
        inner = ",".join(_type_string(c) for c in components)
        return f"({inner}){type_string[len('tuple'):]}"
    return type_string


def _parse_parameters(
    entry: Dict[str, Any], key: str
) -> Tuple[Parameter, ...]:
    parameters = entry.get(key, [])
    if not isinstance(parameters, list):
        raise MalformedAbi(f"'{key}' must be a list in {entry!r}")

    parsed = []
    for parameter in parameters:
        if not isinstance(parameter, dict) or "type" not in parameter:
            raise MalformedAbi(f"malformed parameter {parameter!r}")
        try:
            abi_type = parse_type(_type_string(parameter))
        except UnsupportedType as error:
            raise MalformedAbi(str(error)) from error
        parsed.append(
            Parameter(
                name=parameter.get("name") or "",
                type=abi_type,
                indexed=bool(parameter.get("indexed", False)),
            )
        )
    return tuple(parsed)


def _entry_name(entry: Dict[str, Any]) -> str:
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedAbi(
            f"{entry.get('type')} entry without a name: {entry!r}"
        )
    return name


def _state_mutability(entry: Dict[str, Any]) -> str:
    if "stateMutability" in entry:
        return entry["stateMutability"]
    # Pre-0.5 compilers only emit `constant` and `payable` flags.
    if entry.get("constant"):
        return "view"
    if entry.get("payable"):
        return "payable"
    return "nonpayable"


def _normalise_bytecode(
    bytecode: Union[Bytes, str, Dict[str, Any], None]
) -> Bytes:
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")
    if bytecode is None:
        raise MalformedAbi("missing bytecode")
    if isinstance(bytecode, str):
        try:
            return hex_to_bytes(bytecode)
        except ValueError as error:
            raise MalformedAbi(
                f"bytecode is not valid hex: {error}"
            ) from error
    return bytes(bytecode)


class ContractMetadata:
    """
    Validated ABI plus deployment bytecode of one contract.

    Parameters
    ----------
    abi :
        JSON ABI entries, a JSON string holding them, or human readable
        fragments such as `"function number() view returns (uint32)"`.
    bytecode :
        Creation bytecode, raw or hex encoded. May be empty for bindings
        that only talk to already deployed contracts.

    Raises
    ------
    MalformedAbi
        If an entry is malformed, a type cannot be parsed, a function or
        event is declared twice with the same inputs, or more than one
        constructor is declared.
    """

    def __init__(
        self,
        abi: Union[str, Sequence[Any]],
        bytecode: Union[Bytes, str] = b"",
    ) -> None:
        if isinstance(abi, str):
            try:
                abi = json.loads(abi)
            except json.JSONDecodeError as error:
                raise MalformedAbi(
                    f"ABI is not valid JSON: {error}"
                ) from error
        if not isinstance(abi, (list, tuple)):
            raise MalformedAbi("ABI must be a list of entries")
        if abi and all(isinstance(entry, str) for entry in abi):
            abi = parse_abi(abi)

        self._abi: AbiJson = copy.deepcopy(list(abi))
        self._bytecode = _normalise_bytecode(bytecode)
        self._functions: Dict[str, List[FunctionSignature]] = {}
        self._events: Dict[str, List[EventSignature]] = {}
        self._errors: Dict[bytes, ErrorSignature] = {}
        self._constructor: Optional[ConstructorSignature] = None

        for entry in self._abi:
            self._load_entry(entry)

    @classmethod
    def from_abi(
        cls,
        abi: Union[str, Sequence[Any]],
        bytecode: Union[Bytes, str] = b"",
    ) -> "ContractMetadata":
        """
        Build metadata from an ABI and optional bytecode.
        """
        return cls(abi, bytecode)

    @classmethod
    def from_artifact(cls, artifact: Dict[str, Any]) -> "ContractMetadata":
        """
        Build metadata from a compiler build artifact holding `abi` and
        `bytecode`.

        Raises
        ------
        MalformedAbi
            If the artifact has no ABI or no bytecode.
        """
        if not isinstance(artifact, dict) or "abi" not in artifact:
            raise MalformedAbi("expected a full contract metadata object")
        bytecode = _normalise_bytecode(artifact.get("bytecode"))
        return cls(artifact["abi"], bytecode)

    def _load_entry(self, entry: Any) -> None:
        if not isinstance(entry, dict):
            raise MalformedAbi(f"ABI entry must be an object: {entry!r}")
        kind = entry.get("type", "function")
        if kind not in _ENTRY_KINDS:
            raise MalformedAbi(f"unknown ABI entry type {kind!r}")

        if kind == "function":
            function = FunctionSignature(
                name=_entry_name(entry),
                inputs=_parse_parameters(entry, "inputs"),
                outputs=_parse_parameters(entry, "outputs"),
                state_mutability=_state_mutability(entry),
            )
            overloads = self._functions.setdefault(function.name, [])
            if any(f.canonical == function.canonical for f in overloads):
                raise MalformedAbi(f"duplicate function {function.canonical}")
            overloads.append(function)

        elif kind == "event":
            event = EventSignature(
                name=_entry_name(entry),
                inputs=_parse_parameters(entry, "inputs"),
                anonymous=bool(entry.get("anonymous", False)),
            )
            overloads = self._events.setdefault(event.name, [])
            if any(e.canonical == event.canonical for e in overloads):
                raise MalformedAbi(f"duplicate event {event.canonical}")
            overloads.append(event)

        elif kind == "error":
            error = ErrorSignature(
                name=_entry_name(entry),
                inputs=_parse_parameters(entry, "inputs"),
            )
            if error.selector in self._errors:
                raise MalformedAbi(f"duplicate error {error.canonical}")
            self._errors[bytes(error.selector)] = error

        elif kind == "constructor":
            if self._constructor is not None:
                raise MalformedAbi("more than one constructor declared")
            self._constructor = ConstructorSignature(
                inputs=_parse_parameters(entry, "inputs"),
                state_mutability=_state_mutability(entry),
            )

    @property
    def abi(self) -> AbiJson:
        """
        A copy of the JSON ABI entries.
        """
        return copy.deepcopy(self._abi)

    @property
    def bytecode(self) -> Bytes:
        return self._bytecode

    @property
    def constructor(self) -> Optional[ConstructorSignature]:
        return self._constructor

    @property
    def functions(self) -> Tuple[FunctionSignature, ...]:
        return tuple(f for fs in self._functions.values() for f in fs)

    @property
    def events(self) -> Tuple[EventSignature, ...]:
        return tuple(e for es in self._events.values() for e in es)

    @property
    def errors(self) -> Tuple[ErrorSignature, ...]:
        return tuple(self._errors.values())

    def function(
        self, name: str, arg_count: Optional[int] = None
    ) -> FunctionSignature:
        """
        Look up a function by name, or by canonical signature such as
        `"transfer(address,uint256)"`.

        Overloaded names are resolved by `arg_count`.

        Raises
        ------
        UnknownMember
            If no function has that name.
        ArityMismatch
            If no overload takes `arg_count` arguments, or the overload is
            ambiguous and needs the canonical signature to pick it.
        """
        if "(" in name:
            wanted = name.replace(" ", "")
            for function in self.functions:
                if function.canonical == wanted:
                    return function
            raise UnknownMember(f"no function {name} in ABI")

        overloads = self._functions.get(name)
        if not overloads:
            raise UnknownMember(f"no function named {name!r} in ABI")
        if arg_count is not None:
            overloads = [f for f in overloads if len(f.inputs) == arg_count]
            if not overloads:
                raise ArityMismatch(
                    f"no overload of {name!r} takes {arg_count} arguments"
                )
        if len(overloads) > 1:
            candidates = ", ".join(f.canonical for f in overloads)
            raise ArityMismatch(
                f"{name!r} is overloaded ({candidates}); "
                "use the canonical signature"
            )
        return overloads[0]

    def event(self, name: str) -> EventSignature:
        """
        Look up an event by name or canonical signature.

        Raises
        ------
        UnknownMember
            If the event is not declared, or the name is overloaded.
        """
        if "(" in name:
            wanted = name.replace(" ", "")
            for event in self.events:
                if event.canonical == wanted:
                    return event
            raise UnknownMember(f"no event {name} in ABI")

        overloads = self._events.get(name)
        if not overloads:
            raise UnknownMember(f"no event named {name!r} in ABI")
        if len(overloads) > 1:
            raise UnknownMember(
                f"event {name!r} is overloaded; use the canonical signature"
            )
        return overloads[0]

    def event_by_topic(self, topic: Hash32) -> Optional[EventSignature]:
        """
        The non-anonymous event whose signature hash is `topic`, if any.
        """
        for event in self.events:
            if not event.anonymous and event.topic == topic:
                return event
        return None

    def error_by_selector(self, selector: Bytes) -> Optional[ErrorSignature]:
        """
        The custom error whose selector is `selector`, if any.
        """
        return self._errors.get(bytes(selector))


def load_metadata(
    path: Union[str, "os.PathLike[str]"]
) -> ContractMetadata:
    """
    Load contract metadata from a build artifact JSON file.

    Parameters
    ----------
    path :
        Location of the artifact.

    Returns
    -------
    metadata : `ContractMetadata`
        The validated metadata.

    Raises
    ------
    MalformedAbi
        If the file is not valid JSON, or is not a full artifact with both
        `abi` and `bytecode`.
    """
    with open(path) as f:
        try:
            artifact = json.load(f)
        except json.JSONDecodeError as error:
            raise MalformedAbi(
                f"{path} is not valid JSON: {error}"
            ) from error
    return ContractMetadata.from_artifact(artifact)
