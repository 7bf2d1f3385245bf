"""
Ethereum Provider
^^^^^^^^^^^^^^^^^
A typed contract-interaction layer running directly on top of an
in-process EVM, with no RPC in between.

A `Provider` owns a ledger of accounts and forwards transactions to an
execution engine. A `Contract` binding encodes calls from native Python
values into the standard contract ABI, and decodes return values, logs and
revert reasons back out.
"""
import sys

__version__ = "0.1.0"

#
#  Ensure we can reach 1024 frames of recursion
#
EVM_RECURSION_LIMIT = 1024 * 12
sys.setrecursionlimit(max(EVM_RECURSION_LIMIT, sys.getrecursionlimit()))

from .account_types import AccountView, Address  # noqa: E402
from .config import ProviderConfig  # noqa: E402
from .contract import Contract, DecodedEvent  # noqa: E402
from .metadata import ContractMetadata, load_metadata  # noqa: E402
from .provider import Provider  # noqa: E402
from .transactions import CallResult, Log, Transaction  # noqa: E402
from .utils.numeric import to_wei  # noqa: E402

__all__ = (
    "AccountView",
    "Address",
    "CallResult",
    "Contract",
    "ContractMetadata",
    "DecodedEvent",
    "Log",
    "Provider",
    "ProviderConfig",
    "Transaction",
    "load_metadata",
    "to_wei",
)
