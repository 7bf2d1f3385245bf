"""
Transactions and Results
^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The execution requests accepted by `Provider.execute` and the results it
hands back.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256, Uint

from .abi.codec import decode_revert_reason
from .account_types import Address


@dataclass(frozen=True)
class Transaction:
    """
    One execution request. A missing `to` deploys `data` as init code.
    """

    sender: Address
    to: Optional[Address] = None
    data: Bytes = b""
    value: U256 = U256(0)
    gas_limit: Optional[Uint] = None

    @property
    def is_deployment(self) -> bool:
        """
        Whether this transaction creates a contract.
        """
        return self.to is None


@dataclass(frozen=True)
class Log:
    """
    Data record produced during the execution of a transaction.
    """

    address: Address
    topics: Tuple[Bytes32, ...]
    data: Bytes


@dataclass(frozen=True)
class CallResult:
    """
    Outcome of one execution.

    `error` holds the exception the engine halted with when `success` is
    false; for a revert, `return_data` holds the revert payload.
    """

    return_data: Bytes
    gas_used: Uint
    logs: Tuple[Log, ...]
    success: bool
    error: Optional[Exception] = None

    @property
    def revert_reason(self) -> Optional[str]:
        """
        Human readable revert reason, when the payload uses one of the
        standard `Error(string)` or `Panic(uint256)` encodings.
        """
        if self.success:
            return None
        return decode_revert_reason(self.return_data)
