"""
Execution Engine
^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The boundary between the provider and whatever executes transactions.

An engine is handed a read-only view of the ledger and one transaction. It
never writes to the ledger itself: everything the transaction changed comes
back as a `StateDiff`, which the provider applies atomically (or throws away
when the transaction failed or was only simulated).

The default engine is `ethereum_provider.engine.cancun.CancunEngine`, which
runs the Cancun EVM from the `ethereum` package.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U64, U256, Uint
from typing_extensions import Protocol

from ..account_types import Account, Address
from ..transactions import Log, Transaction


class StateView(Protocol):
    """
    Read-only access to committed ledger state.
    """

    def get_account(self, address: Address) -> Optional[Account]:
        """
        The account at `address`, or `None` if there is none.
        """
        ...

    def get_storage(self, address: Address, key: Bytes32) -> U256:
        """
        Value of a storage slot, zero when unset.
        """
        ...

    def accounts(self) -> Iterable[Tuple[Address, Account]]:
        """
        Every account in the ledger.
        """
        ...

    def storage(self, address: Address) -> Iterable[Tuple[Bytes32, U256]]:
        """
        Every non-zero storage slot of the account at `address`.
        """
        ...


@dataclass(frozen=True)
class AccountDiff:
    """
    The final state of one account touched by a transaction.

    `storage` only holds the slots that were written; a zero value clears
    the slot. `created` is set for accounts created by the transaction,
    whose previous storage must be dropped.
    """

    account: Account
    storage: Dict[Bytes32, U256] = field(default_factory=dict)
    created: bool = False


@dataclass(frozen=True)
class StateDiff:
    """
    Every account change made by one successful transaction.
    """

    accounts: Dict[Address, AccountDiff] = field(default_factory=dict)


@dataclass(frozen=True)
class EngineResult:
    """
    Outcome of executing a transaction.

    `gas_used` already accounts for refunds. For failed executions `diff` is
    empty, `logs` is empty and `return_data` holds the revert payload, if
    any. For deployments, `return_data` is the code that was deployed.
    """

    diff: StateDiff
    return_data: Bytes
    gas_used: Uint
    logs: Tuple[Log, ...]
    success: bool
    error: Optional[Exception] = None


@dataclass(frozen=True)
class BlockEnvironment:
    """
    The block a transaction is executed in.
    """

    coinbase: Address
    number: Uint
    time: U256
    gas_limit: Uint
    base_fee_per_gas: Uint
    prev_randao: Bytes32
    chain_id: U64
    gas_price: Uint


class ExecutionEngine(ABC):
    """
    Executes transactions against a read-only state view.

    Implementations must be deterministic: the same view and transaction
    always produce the same result. They must not change the sender's
    nonce, and must not charge the transaction fee; both are done by the
    provider when it commits.
    """

    @abstractmethod
    def execute(self, state: StateView, tx: Transaction) -> EngineResult:
        """
        Execute `tx` against `state`.

        Parameters
        ----------
        state :
            Committed ledger state. Never modified.
        tx :
            The transaction to run. `gas_limit` has already been filled in
            by the caller.

        Returns
        -------
        result : `EngineResult`
            The outcome. Reverts and exceptional halts are reported here,
            with `success` false.

        Raises
        ------
        ethereum.exceptions.InvalidTransaction
            If the transaction cannot be executed at all, e.g. because its
            gas limit does not cover the intrinsic cost.
        """
        raise NotImplementedError
