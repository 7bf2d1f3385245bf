"""
Cancun Engine
^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Runs transactions on the Cancun EVM of the `ethereum` package.

Every transaction gets a fresh `ethereum.cancun.state.State` loaded from the
caller's view. The top level message is built the same way a system
transaction is, then handed to the fork's interpreter. Whatever the
interpreter left in the state is compared against the view to produce the
`StateDiff`.
"""

import logging
from dataclasses import fields
from typing import Any, Dict, Set, Type, TypeVar

from ethereum.cancun.fork_types import Account as CancunAccount
from ethereum.cancun.state import (
    State,
    TransientStorage,
    account_has_code_or_nonce,
    account_has_storage,
    destroy_account,
    get_account,
    set_account,
    set_storage,
)
from ethereum.cancun.transactions import (
    LegacyTransaction,
    calculate_intrinsic_cost,
)
from ethereum.cancun.utils.address import compute_contract_address
from ethereum.cancun.vm import (
    BlockEnvironment as CancunBlockEnvironment,
    Message,
    TransactionEnvironment,
)
from ethereum.cancun.vm.exceptions import AddressCollision
from ethereum.cancun.vm.interpreter import (
    MAX_CODE_SIZE,
    process_create_message,
    process_message,
)
from ethereum.cancun.vm.precompiled_contracts.mapping import (
    PRE_COMPILED_CONTRACTS,
)
from ethereum.exceptions import InsufficientBalanceError, InvalidSenderError
from ethereum_types.bytes import Bytes0, Bytes32
from ethereum_types.numeric import U64, U256, Uint

from ..account_types import Account, Address
from ..transactions import Log, Transaction
from . import (
    AccountDiff,
    BlockEnvironment,
    EngineResult,
    ExecutionEngine,
    StateDiff,
    StateView,
)
from .exceptions import (
    GasLimitExceedsBlock,
    InitCodeTooLarge,
    IntrinsicGasError,
)

REFUND_QUOTIENT = Uint(5)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _environment(cls: Type[T], **values: Any) -> T:
    # Environment dataclasses gain and lose fields between releases of
    # `ethereum`; only pass the ones this release declares.
    declared = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    return cls(**{k: v for k, v in values.items() if k in declared})


def load_state(view: StateView) -> State:
    """
    Copy every account and storage slot of `view` into a fresh `State`.
    """
    state = State()
    for address, account in view.accounts():
        set_account(
            state,
            address,
            CancunAccount(
                nonce=account.nonce,
                balance=account.balance,
                code=account.code,
            ),
        )
        for key, value in view.storage(address):
            set_storage(state, address, key, value)
    return state


def state_diff(view: StateView, state: State) -> StateDiff:
    """
    Every account of `state` that differs from `view`.

    Accounts that are gone from `state` are left out: the only accounts a
    Cancun transaction can delete are the ones it created itself.
    """
    accounts: Dict[Address, AccountDiff] = {}
    for address, account in state._main_trie._data.items():
        before = view.get_account(address)
        after = Account(
            nonce=account.nonce,
            balance=account.balance,
            code=account.code,
        )

        slots_before = dict(view.storage(address))
        trie = state._storage_tries.get(address)
        slots_after: Dict[Bytes32, U256] = {}
        if trie is not None:
            slots_after = dict(trie._data)

        storage = {
            key: value
            for key, value in slots_after.items()
            if slots_before.get(key) != value
        }
        for key in slots_before:
            if key not in slots_after:
                storage[key] = U256(0)

        if before == after and not storage:
            continue
        accounts[address] = AccountDiff(
            account=after, storage=storage, created=before is None
        )
    return StateDiff(accounts=accounts)


class CancunEngine(ExecutionEngine):
    """
    The default engine: runs transactions through the Cancun interpreter of
    the `ethereum` package.

    Parameters
    ----------
    block :
        The block every transaction is executed in.
    """

    block: BlockEnvironment

    def __init__(self, block: BlockEnvironment) -> None:
        self.block = block

    def execute(self, state: StateView, tx: Transaction) -> EngineResult:
        """
        Execute `tx` against `state` and collect what it changed.
        """
        gas_limit = (
            self.block.gas_limit if tx.gas_limit is None else tx.gas_limit
        )

        sender = state.get_account(tx.sender)
        if sender is None:
            raise InvalidSenderError("sender account does not exist")
        if sender.balance < tx.value:
            raise InsufficientBalanceError("sender cannot cover the value")
        if tx.is_deployment and len(tx.data) > 2 * MAX_CODE_SIZE:
            raise InitCodeTooLarge(
                f"init code is {len(tx.data)} bytes long"
            )

        intrinsic_cost = calculate_intrinsic_cost(
            LegacyTransaction(
                nonce=U256(sender.nonce),
                gas_price=self.block.gas_price,
                gas=gas_limit,
                to=Bytes0(b"") if tx.to is None else tx.to,
                value=tx.value,
                data=tx.data,
                v=U256(0),
                r=U256(0),
                s=U256(0),
            )
        )
        if gas_limit < intrinsic_cost:
            raise IntrinsicGasError(
                f"gas limit {gas_limit} is below the intrinsic cost "
                f"{intrinsic_cost}"
            )
        if gas_limit > self.block.gas_limit:
            raise GasLimitExceedsBlock(
                f"gas limit {gas_limit} exceeds the block gas limit "
                f"{self.block.gas_limit}"
            )

        overlay = load_state(state)
        message = self._prepare_message(
            tx, overlay, sender.nonce, gas_limit - intrinsic_cost
        )

        if tx.is_deployment:
            target = message.current_target
            collision = account_has_code_or_nonce(
                overlay, target
            ) or account_has_storage(overlay, target)
            if collision:
                logger.debug("address 0x%s is taken", target.hex())
                return EngineResult(
                    diff=StateDiff(),
                    return_data=b"",
                    gas_used=gas_limit,
                    logs=(),
                    success=False,
                    error=AddressCollision(),
                )
            evm = process_create_message(message)
        else:
            evm = process_message(message)

        gas_used = gas_limit - evm.gas_left
        if evm.error is not None:
            logger.debug("transaction failed: %r", evm.error)
            return EngineResult(
                diff=StateDiff(),
                return_data=evm.output,
                gas_used=gas_used,
                logs=(),
                success=False,
                error=evm.error,
            )

        refund_counter = Uint(max(evm.refund_counter, 0))
        gas_used -= min(gas_used // REFUND_QUOTIENT, refund_counter)

        for address in evm.accounts_to_delete:
            destroy_account(overlay, address)

        if tx.is_deployment:
            return_data = get_account(overlay, message.current_target).code
        else:
            return_data = evm.output

        return EngineResult(
            diff=state_diff(state, overlay),
            return_data=return_data,
            gas_used=gas_used,
            logs=tuple(
                Log(
                    address=log.address,
                    topics=tuple(log.topics),
                    data=log.data,
                )
                for log in evm.logs
            ),
            success=True,
        )

    def _prepare_message(
        self, tx: Transaction, state: State, nonce: Uint, gas: Uint
    ) -> Message:
        block_env = _environment(
            CancunBlockEnvironment,
            chain_id=self.block.chain_id,
            state=state,
            block_gas_limit=self.block.gas_limit,
            block_hashes=[],
            coinbase=self.block.coinbase,
            number=self.block.number,
            base_fee_per_gas=self.block.base_fee_per_gas,
            time=self.block.time,
            prev_randao=self.block.prev_randao,
            excess_blob_gas=U64(0),
            parent_beacon_block_root=Bytes32(b"\x00" * 32),
        )
        tx_env = _environment(
            TransactionEnvironment,
            origin=tx.sender,
            gas_price=self.block.gas_price,
            gas=gas,
            access_list_addresses={self.block.coinbase},
            access_list_storage_keys=set(),
            transient_storage=TransientStorage(),
            blob_versioned_hashes=(),
            index_in_block=None,
            tx_hash=None,
            traces=[],
        )

        if tx.to is None:
            current_target = compute_contract_address(tx.sender, nonce)
            target: Any = Bytes0(b"")
            code_address = None
            code = tx.data
            data = b""
        else:
            current_target = tx.to
            target = tx.to
            code_address = tx.to
            code = get_account(state, tx.to).code
            data = tx.data

        accessed_addresses: Set[Address] = {tx.sender, current_target}
        accessed_addresses.update(PRE_COMPILED_CONTRACTS.keys())
        accessed_addresses.update(tx_env.access_list_addresses)

        return Message(
            block_env=block_env,
            tx_env=tx_env,
            caller=tx.sender,
            target=target,
            current_target=current_target,
            gas=gas,
            value=tx.value,
            data=data,
            code_address=code_address,
            code=code,
            depth=Uint(0),
            should_transfer_value=True,
            is_static=False,
            accessed_addresses=accessed_addresses,
            accessed_storage_keys=set(),
            parent_evm=None,
        )
