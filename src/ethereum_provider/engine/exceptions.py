"""
Execution Engine Exceptions
^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Reasons an engine refuses to run a transaction at all.

These escape `ExecutionEngine.execute`. Reverts and exceptional halts are
not raised: they come back in `EngineResult.error` as the exceptions of
`ethereum.cancun.vm.exceptions`.
"""

from ethereum.exceptions import InvalidTransaction


class IntrinsicGasError(InvalidTransaction):
    """
    Thrown when the gas limit of a transaction does not cover its intrinsic
    cost.
    """


class GasLimitExceedsBlock(InvalidTransaction):
    """
    Thrown when the gas limit of a transaction is above the block gas limit.
    """


class InitCodeTooLarge(InvalidTransaction):
    """
    Thrown when the init code of a deployment is longer than twice the
    maximum code size.
    """
