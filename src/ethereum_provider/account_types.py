"""
Account Types
^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Ledger entries owned by the provider, and the read-only view of them handed
back to callers.
"""

from dataclasses import dataclass

from ethereum_types.bytes import Bytes, Bytes20
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U256, Uint

from .crypto import Hash32, keccak256

Address = Bytes20


@slotted_freezable
@dataclass
class Account:
    """
    State associated with an address. Contract storage is kept by the
    provider alongside the account, keyed by address.
    """

    nonce: Uint
    balance: U256
    code: Bytes


EMPTY_ACCOUNT = Account(
    nonce=Uint(0),
    balance=U256(0),
    code=b"",
)


@dataclass(frozen=True)
class AccountView:
    """
    Read-only snapshot of an account returned by `Provider.view_account`.
    """

    address: Address
    balance: U256
    nonce: Uint
    code: Bytes

    @property
    def has_code(self) -> bool:
        """
        Whether a contract has been deployed at this address.
        """
        return len(self.code) > 0

    @property
    def code_hash(self) -> Hash32:
        """
        keccak256 of the account's code (the empty-code hash for EOAs).
        """
        return keccak256(self.code)
