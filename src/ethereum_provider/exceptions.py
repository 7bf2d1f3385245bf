"""
Error types raised by the provider, the ABI codec and contract bindings.
"""

from typing import Optional

from ethereum_types.numeric import Uint


class ProviderException(Exception):
    """
    Base class for all exceptions _expected_ to be thrown during normal
    operation.
    """


class UnknownSender(ProviderException):
    """
    Thrown when a transaction originates from an address with no account in
    the ledger.
    """


class InsufficientFunds(ProviderException):
    """
    Thrown when the sender cannot cover the transferred value plus the
    maximum gas cost of a transaction.
    """


class DuplicateAddress(ProviderException):
    """
    Thrown when creating an account at an address that is already in use.
    """


class NotFound(ProviderException):
    """
    Thrown when looking up an account that does not exist.
    """


class MissingAddress(ProviderException):
    """
    Thrown when calling through a contract binding that has not been bound
    to a deployed address.
    """


class AbiError(ProviderException):
    """
    Base class for errors encoding or decoding contract ABI data. These are
    caused by caller input and are never worth retrying.
    """


class UnsupportedType(AbiError):
    """
    Thrown when a value cannot be encoded as its declared ABI type, or when
    a type string is not a valid ABI type.
    """


class ArityMismatch(AbiError):
    """
    Thrown when the number of arguments does not match the signature.
    """


class DecodeError(AbiError):
    """
    Thrown when ABI encoded data is truncated or malformed.
    """


class TopicCountMismatch(AbiError):
    """
    Thrown when the topics of a log do not match the indexed parameters of
    the event being decoded.
    """


class UnknownMember(AbiError):
    """
    Thrown when a function, event or error is not declared by the ABI.
    """


class MalformedAbi(AbiError):
    """
    Thrown when contract metadata is internally inconsistent.
    """


class EngineError(ProviderException):
    """
    Wraps a failure reported by the execution engine: a revert, an
    exceptional halt such as running out of gas, or a transaction the engine
    refused to run.
    """

    inner: Optional[Exception]
    revert_reason: Optional[str]
    gas_used: Optional[Uint]

    def __init__(
        self,
        message: str,
        inner: Optional[Exception] = None,
        revert_reason: Optional[str] = None,
        gas_used: Optional[Uint] = None,
    ) -> None:
        super().__init__(message)
        self.inner = inner
        self.revert_reason = revert_reason
        self.gas_used = gas_used
