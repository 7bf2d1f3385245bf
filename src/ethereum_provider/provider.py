"""
Provider
^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The `Provider` owns the ledger: every account, its balance, nonce, code and
storage. Transactions are handed to an `ExecutionEngine` together with a
read-only view of the ledger; whatever the engine reports back is applied
in one step, or not at all.
"""

import logging
import threading
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from ethereum.cancun.utils.address import compute_contract_address
from ethereum.exceptions import InvalidTransaction
from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U256, Uint

from .account_types import Account, AccountView, Address
from .config import ProviderConfig
from .engine import EngineResult, ExecutionEngine
from .engine.cancun import CancunEngine
from .exceptions import (
    DuplicateAddress,
    EngineError,
    InsufficientFunds,
    NotFound,
    UnknownSender,
)
from .transactions import CallResult, Transaction

logger = logging.getLogger(__name__)


class LedgerView:
    """
    Read-only window onto the ledger of a `Provider`, handed to engines.
    """

    def __init__(
        self,
        accounts: Mapping[Address, Account],
        storage: Mapping[Address, Mapping[Bytes32, U256]],
    ) -> None:
        self._accounts = MappingProxyType(accounts)
        self._storage = MappingProxyType(storage)

    def get_account(self, address: Address) -> Optional[Account]:
        return self._accounts.get(address)

    def get_storage(self, address: Address, key: Bytes32) -> U256:
        slots = self._storage.get(address)
        if slots is None:
            return U256(0)
        return slots.get(key, U256(0))

    def accounts(self) -> Iterable[Tuple[Address, Account]]:
        return self._accounts.items()

    def storage(self, address: Address) -> Iterable[Tuple[Bytes32, U256]]:
        return self._storage.get(address, {}).items()


class Provider:
    """
    An in-process ledger that executes transactions through an engine.

    All public methods hold the provider's lock for their whole duration,
    so concurrent callers observe transactions one at a time.

    Parameters
    ----------
    config :
        Chain and block parameters. Defaults to `ProviderConfig()`.
    engine :
        The engine transactions run on. Defaults to a `CancunEngine`
        built from `config`.
    """

    config: ProviderConfig
    engine: ExecutionEngine

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        engine: Optional[ExecutionEngine] = None,
    ) -> None:
        self.config = config if config is not None else ProviderConfig()
        if engine is None:
            engine = CancunEngine(self.config.block_environment())
        self.engine = engine
        self._accounts: Dict[Address, Account] = {}
        self._storage: Dict[Address, Dict[Bytes32, U256]] = {}
        self._lock = threading.RLock()

    def create_account(
        self, address: Address, balance: Optional[U256] = None
    ) -> None:
        """
        Add an account with nonce zero, no code and no storage.

        Raises
        ------
        DuplicateAddress
            If an account already exists at `address`.
        """
        with self._lock:
            if address in self._accounts:
                raise DuplicateAddress(
                    f"account 0x{address.hex()} already exists"
                )
            self._accounts[address] = Account(
                nonce=Uint(0),
                balance=U256(0) if balance is None else U256(balance),
                code=b"",
            )
            logger.debug(
                "created account 0x%s with balance %s",
                address.hex(),
                self._accounts[address].balance,
            )

    def view_account(self, address: Address) -> AccountView:
        """
        Snapshot of the account at `address`.

        Raises
        ------
        NotFound
            If there is no account at `address`.
        """
        with self._lock:
            account = self._accounts.get(address)
            if account is None:
                raise NotFound(f"no account at 0x{address.hex()}")
            return AccountView(
                address=address,
                balance=account.balance,
                nonce=account.nonce,
                code=account.code,
            )

    def balance_of(self, address: Address) -> U256:
        """
        Balance of `address`, zero if there is no account there.
        """
        with self._lock:
            account = self._accounts.get(address)
            return U256(0) if account is None else account.balance

    def get_storage(
        self, address: Address, key: Union[Bytes32, int]
    ) -> U256:
        """
        Value of one storage slot of the account at `address`.

        Raises
        ------
        NotFound
            If there is no account at `address`.
        """
        if not isinstance(key, bytes):
            key = U256(key).to_be_bytes32()
        with self._lock:
            if address not in self._accounts:
                raise NotFound(f"no account at 0x{address.hex()}")
            return self._storage.get(address, {}).get(key, U256(0))

    def execute(
        self, tx: Transaction, commit: bool = True
    ) -> Tuple[Optional[Address], CallResult]:
        """
        Run `tx` and, when it succeeds and `commit` is set, apply its
        effects to the ledger.

        A successful commit also increments the sender's nonce and charges
        `gas_used * gas_price` to the sender. Failed transactions, and all
        transactions run with `commit=False`, leave the ledger untouched.

        Returns
        -------
        created : `Optional[Address]`
            Address of the deployed contract, for a successful deployment.
        result : `CallResult`
            What the execution produced.

        Raises
        ------
        UnknownSender
            If the sender has no account.
        InsufficientFunds
            If the sender cannot cover `value + gas_limit * gas_price`.
        EngineError
            If the engine refused to run the transaction.
        """
        with self._lock:
            sender = self._accounts.get(tx.sender)
            if sender is None:
                raise UnknownSender(
                    f"sender 0x{tx.sender.hex()} has no account"
                )

            gas_limit = (
                tx.gas_limit
                if tx.gas_limit is not None
                else Uint(self.config.default_gas_limit)
            )
            tx = replace(tx, gas_limit=gas_limit)

            max_cost = int(tx.value) + int(gas_limit) * self.config.gas_price
            if int(sender.balance) < max_cost:
                raise InsufficientFunds(
                    f"sender 0x{tx.sender.hex()} has {sender.balance} wei, "
                    f"needs {max_cost}"
                )

            created = None
            if tx.is_deployment:
                created = compute_contract_address(tx.sender, sender.nonce)

            view = LedgerView(self._accounts, self._storage)
            try:
                outcome = self.engine.execute(view, tx)
            except InvalidTransaction as error:
                raise EngineError(str(error), inner=error) from error

            result = CallResult(
                return_data=outcome.return_data,
                gas_used=outcome.gas_used,
                logs=outcome.logs,
                success=outcome.success,
                error=outcome.error,
            )

            if not outcome.success:
                logger.info(
                    "transaction from 0x%s failed after %s gas: %r",
                    tx.sender.hex(),
                    outcome.gas_used,
                    outcome.error,
                )
                return None, result

            if commit:
                self._commit(tx.sender, outcome)
                if created is not None:
                    logger.info(
                        "deployed contract at 0x%s (%s gas)",
                        created.hex(),
                        outcome.gas_used,
                    )
            return created, result

    def transfer(
        self, sender: Address, to: Address, value: U256
    ) -> CallResult:
        """
        Send `value` wei from `sender` to `to`.

        Raises
        ------
        EngineError
            If the transfer did not succeed.
        """
        _, result = self.execute(
            Transaction(sender=sender, to=to, value=U256(value))
        )
        if not result.success:
            raise EngineError(
                f"transfer to 0x{to.hex()} failed",
                inner=result.error,
                revert_reason=result.revert_reason,
                gas_used=result.gas_used,
            )
        return result

    def _commit(self, sender_address: Address, outcome: EngineResult) -> None:
        # Everything is computed before the ledger is written, so a failure
        # here leaves it as it was.
        accounts = {
            address: diff.account
            for address, diff in outcome.diff.accounts.items()
        }
        sender = accounts.get(sender_address, self._accounts[sender_address])
        fee = U256(int(outcome.gas_used) * self.config.gas_price)
        accounts[sender_address] = Account(
            nonce=sender.nonce + Uint(1),
            balance=sender.balance - fee,
            code=sender.code,
        )

        storage = {}
        for address, diff in outcome.diff.accounts.items():
            if diff.created:
                slots = {}
            else:
                slots = dict(self._storage.get(address, {}))
            for key, value in diff.storage.items():
                if value == 0:
                    slots.pop(key, None)
                else:
                    slots[key] = value
            storage[address] = slots

        self._accounts.update(accounts)
        for address, slots in storage.items():
            if slots:
                self._storage[address] = slots
            else:
                self._storage.pop(address, None)
