"""
Contract Bindings
^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A `Contract` pairs `ContractMetadata` with the address the contract lives
at, and turns method names and native Python arguments into transactions
sent through a `Provider`.

Return data is decoded against the function's outputs, and failures are
raised as `EngineError` carrying the decoded revert reason.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from .abi.codec import (
    decode,
    decode_log,
    decode_return,
    decode_revert_reason,
    encode_arguments,
    encode_call,
)
from .abi.signatures import FunctionSignature
from .account_types import Address
from .exceptions import (
    ArityMismatch,
    DecodeError,
    EngineError,
    MissingAddress,
    TopicCountMismatch,
)
from .metadata import ContractMetadata
from .provider import Provider
from .transactions import CallResult, Log, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedEvent:
    """
    A log matched against one of the contract's events.

    `args` maps parameter names to values; unnamed parameters are only
    available positionally through `values`.
    """

    name: str
    address: Address
    args: Dict[str, Any]
    values: Tuple[Any, ...]


class Contract:
    """
    Binding to a contract described by `metadata`, deployed at `address`.

    Parameters
    ----------
    metadata :
        ABI and bytecode of the contract.
    address :
        Where the contract is deployed. Bindings returned by `at` carry
        it; `deploy` leaves it alone.
    """

    metadata: ContractMetadata
    address: Optional[Address]

    def __init__(
        self,
        metadata: ContractMetadata,
        address: Optional[Address] = None,
    ) -> None:
        self.metadata = metadata
        self.address = address

    @classmethod
    def from_abi(
        cls,
        abi: Union[str, Sequence[Any]],
        bytecode: Union[Bytes, str] = b"",
        address: Optional[Address] = None,
    ) -> "Contract":
        """
        Build a binding straight from an ABI and optional bytecode.
        """
        return cls(ContractMetadata.from_abi(abi, bytecode), address)

    def at(self, address: Address) -> "Contract":
        """
        A copy of this binding pointing at `address`.
        """
        return type(self)(self.metadata, address)

    def deploy(
        self,
        provider: Provider,
        sender: Address,
        bytecode: Optional[Bytes] = None,
        args: Optional[Sequence[Any]] = None,
        value: Optional[U256] = None,
        gas_limit: Optional[Uint] = None,
    ) -> Tuple[Address, Uint]:
        """
        Deploy the contract from `sender`.

        The binding is not changed, so one binding can serve as a template
        for many deployments. Use `at` with the returned address to talk to
        the new contract.

        Parameters
        ----------
        provider :
            The provider to deploy through.
        sender :
            The deploying account.
        bytecode :
            Creation bytecode. Defaults to the metadata's bytecode.
        args :
            Constructor arguments, ABI encoded after the bytecode.
        value :
            Wei sent to the constructor.
        gas_limit :
            Gas limit. Defaults to the provider's default.

        Returns
        -------
        address : `Address`
            Where the contract was deployed.
        gas_used : `Uint`
            Gas consumed by the deployment.

        Raises
        ------
        ArityMismatch
            If `args` do not match the constructor.
        EngineError
            If the deployment failed.
        """
        code = self.metadata.bytecode if bytecode is None else bytecode
        arguments = list(args) if args is not None else []

        constructor = self.metadata.constructor
        if constructor is None:
            if arguments:
                raise ArityMismatch(
                    "contract has no constructor, but arguments were given"
                )
            data = bytes(code)
        else:
            data = bytes(code) + encode_arguments(
                constructor.inputs, arguments
            )

        created, result = provider.execute(
            Transaction(
                sender=sender,
                to=None,
                data=data,
                value=U256(0) if value is None else U256(value),
                gas_limit=gas_limit,
            )
        )
        if not result.success or created is None:
            raise self._failure("deployment", result)

        return created, result.gas_used

    def call(
        self,
        provider: Provider,
        name: str,
        args: Sequence[Any] = (),
        *,
        caller: Address,
    ) -> Tuple[Any, Uint, Tuple[Log, ...]]:
        """
        Run a function without committing anything to the ledger.

        Returns
        -------
        decoded :
            The decoded return value (see `decode_return`).
        gas_used : `Uint`
            Gas the call would have consumed.
        logs :
            Logs the call would have emitted.
        """
        function = self._function(name, args)
        result = self._execute(
            provider, function, args, caller, U256(0), None, commit=False
        )
        decoded = decode_return(function, result.return_data)
        return decoded, result.gas_used, result.logs

    def send(
        self,
        provider: Provider,
        name: str,
        args: Sequence[Any] = (),
        *,
        caller: Address,
        value: Optional[U256] = None,
        gas_limit: Optional[Uint] = None,
    ) -> Tuple[Any, Uint, Tuple[Log, ...]]:
        """
        Run a function as a transaction and commit its effects.

        Returns the same triple as `call`.
        """
        function = self._function(name, args)
        result = self._execute(
            provider,
            function,
            args,
            caller,
            U256(0) if value is None else U256(value),
            gas_limit,
            commit=True,
        )
        decoded = decode_return(function, result.return_data)
        return decoded, result.gas_used, result.logs

    def decode_logs(self, logs: Sequence[Log]) -> List[DecodedEvent]:
        """
        Decode the logs emitted by this contract that match one of its
        declared events. Other logs are skipped, as are logs whose topics
        do not fit the matching event, such as an ERC-721 `Transfer` seen
        by an ERC-20 binding.
        """
        events = []
        for log in logs:
            if self.address is not None and log.address != self.address:
                continue
            if not log.topics:
                continue
            event = self.metadata.event_by_topic(log.topics[0])
            if event is None:
                continue
            try:
                values = decode_log(event, log.topics, log.data)
            except (TopicCountMismatch, DecodeError) as error:
                logger.debug(
                    "skipping log from 0x%s: %s", log.address.hex(), error
                )
                continue
            events.append(
                DecodedEvent(
                    name=event.name,
                    address=log.address,
                    args={
                        p.name: v
                        for p, v in zip(event.inputs, values)
                        if p.name
                    },
                    values=values,
                )
            )
        return events

    def _function(
        self, name: str, args: Sequence[Any]
    ) -> FunctionSignature:
        return self.metadata.function(name, len(args))

    def _execute(
        self,
        provider: Provider,
        function: FunctionSignature,
        args: Sequence[Any],
        caller: Address,
        value: U256,
        gas_limit: Optional[Uint],
        commit: bool,
    ) -> CallResult:
        if self.address is None:
            raise MissingAddress(
                f"cannot call {function.name}: contract has no address"
            )
        tx = Transaction(
            sender=caller,
            to=self.address,
            data=encode_call(function, list(args)),
            value=value,
            gas_limit=gas_limit,
        )
        _, result = provider.execute(tx, commit=commit)
        if not result.success:
            raise self._failure(function.name, result)
        return result

    def _failure(self, what: str, result: CallResult) -> EngineError:
        reason = self.revert_reason(result.return_data)
        if reason is not None:
            message = f"{what} reverted: {reason}"
        else:
            message = f"{what} failed: {result.error!r}"
        logger.debug(message)
        return EngineError(
            message,
            inner=result.error,
            revert_reason=reason,
            gas_used=result.gas_used,
        )

    def revert_reason(self, data: Bytes) -> Optional[str]:
        """
        Decode a revert payload: `Error(string)`, `Panic(uint256)`, or one
        of the custom errors the ABI declares, rendered as
        `Name(arg1, arg2)`.
        """
        reason = decode_revert_reason(data)
        if reason is not None or len(data) < 4:
            return reason
        error = self.metadata.error_by_selector(data[:4])
        if error is None:
            return None
        try:
            values = decode([p.type for p in error.inputs], data[4:])
        except DecodeError:
            return error.name
        return f"{error.name}({', '.join(repr(v) for v in values)})"
