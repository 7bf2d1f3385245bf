"""
Utility Functions For Numeric Operations
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Numeric helpers for ether amounts.
"""
from decimal import Decimal
from typing import Union

from ethereum_types.numeric import U256

WEI_PER_UNIT = {
    "wei": 1,
    "kwei": 10**3,
    "mwei": 10**6,
    "gwei": 10**9,
    "szabo": 10**12,
    "finney": 10**15,
    "ether": 10**18,
}


def to_wei(amount: Union[int, str, Decimal], unit: str = "ether") -> U256:
    """
    Convert an amount expressed in `unit` into wei.

    Fractional amounts are accepted as strings or `Decimal` so that
    `to_wei("0.5")` is exact. Amounts that do not resolve to a whole number
    of wei raise `ValueError`.
    """
    try:
        multiplier = WEI_PER_UNIT[unit]
    except KeyError:
        raise ValueError(f"unknown ether unit: {unit!r}")

    wei = Decimal(amount) * multiplier
    if wei != wei.to_integral_value():
        raise ValueError(f"{amount} {unit} is not a whole number of wei")
    return U256(int(wei))
