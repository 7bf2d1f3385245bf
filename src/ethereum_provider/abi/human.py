"""
Human Readable ABI
^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Parse human readable ABI fragments, the Solidity-like declarations

.. code-block:: text

    function balanceOf(address owner) view returns (uint256)
    event Transfer(address indexed from, address indexed to, uint256 value)
    error InsufficientBalance(uint256 available, uint256 required)
    constructor(string name)

into the JSON ABI entries a compiler would emit, so a contract binding can
be declared without a build artifact.
"""

import re
from typing import Any, Dict, Iterable, List, Tuple

from ..exceptions import MalformedAbi, UnsupportedType
from .types import parse_type

_KINDS = ("function", "event", "error", "constructor", "fallback", "receive")

_MUTABILITIES = ("pure", "view", "payable", "nonpayable")

# Keywords that may appear in a declaration without changing the ABI.
_IGNORED_MODIFIERS = (
    "external",
    "public",
    "internal",
    "private",
    "virtual",
    "override",
)

_STORAGE_LOCATIONS = ("memory", "calldata", "storage")

_HEAD_RE = re.compile(r"(?:(\w+)\s+)?(\w*)\s*\(")
_ARRAY_SUFFIXES_RE = re.compile(r"(?:\[\d*\])*")


def split_top_level_commas(text: str) -> List[str]:
    """
    Split `text` on commas that are not nested inside parentheses.
    """
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise UnsupportedType(f"unbalanced parentheses in {text!r}")
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise UnsupportedType(f"unbalanced parentheses in {text!r}")
    if current or parts:
        parts.append("".join(current).strip())
    return parts


def find_closing_parenthesis(text: str, start: int) -> int:
    """
    Index of the parenthesis closing the one opened at `text[start]`.
    """
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    raise UnsupportedType(f"unbalanced parentheses in {text!r}")


def _parse_parameter(text: str, allow_indexed: bool) -> Dict[str, Any]:
    text = text.strip()
    if not text:
        raise MalformedAbi("empty parameter")

    if text.startswith("(") or text.startswith("tuple("):
        opening = text.index("(")
        end = find_closing_parenthesis(text, opening)
        suffix = _ARRAY_SUFFIXES_RE.match(text, end + 1)
        assert suffix is not None
        components = _parse_parameter_list(text[opening + 1 : end], False)
        parameter: Dict[str, Any] = {
            "name": "",
            "type": "tuple" + suffix.group(0),
            "components": components,
        }
        rest = text[suffix.end() :].split()
    else:
        words = text.split()
        parameter = {"name": "", "type": parse_type(words[0]).to_type_str()}
        rest = words[1:]

    if allow_indexed:
        parameter["indexed"] = False

    for word in rest:
        if word == "indexed":
            if not allow_indexed:
                raise MalformedAbi(f"unexpected 'indexed' in {text!r}")
            parameter["indexed"] = True
        elif word in _STORAGE_LOCATIONS:
            continue
        elif parameter["name"]:
            raise MalformedAbi(f"unexpected {word!r} in {text!r}")
        else:
            parameter["name"] = word

    return parameter


def _parse_parameter_list(
    text: str, allow_indexed: bool
) -> List[Dict[str, Any]]:
    return [
        _parse_parameter(part, allow_indexed)
        for part in split_top_level_commas(text)
    ]


def _split_parenthesised(text: str, start: int) -> Tuple[str, str]:
    """
    Return the contents of the parentheses opened at `text[start]` and the
    text that follows them.
    """
    end = find_closing_parenthesis(text, start)
    return text[start + 1 : end], text[end + 1 :]


def parse_fragment(fragment: str) -> Dict[str, Any]:
    """
    Parse one human readable declaration into a JSON ABI entry.

    A declaration without a leading keyword is read as a function. The
    `constant` modifier is read as `view`.

    Raises
    ------
    MalformedAbi
        If the fragment cannot be parsed.
    """
    text = fragment.strip().rstrip(";").strip()
    head = _HEAD_RE.match(text)
    if head is None:
        raise MalformedAbi(f"cannot parse ABI fragment {fragment!r}")

    keyword, name = head.group(1), head.group(2)
    if keyword is None and name in _KINDS:
        keyword, name = name, ""
    kind = keyword or "function"
    if kind not in _KINDS:
        raise MalformedAbi(f"unknown ABI fragment kind {kind!r}")
    if kind in ("function", "event", "error") and not name:
        raise MalformedAbi(f"{kind} without a name in {fragment!r}")

    try:
        inputs_text, rest = _split_parenthesised(text, head.end() - 1)
        entry: Dict[str, Any] = {"type": kind}
        if name:
            entry["name"] = name
        entry["inputs"] = _parse_parameter_list(inputs_text, kind == "event")

        outputs: List[Dict[str, Any]] = []
        returns = re.search(r"\breturns\s*\(", rest)
        if returns is not None:
            if kind != "function":
                raise MalformedAbi(f"{kind} cannot declare return values")
            outputs_text, trailer = _split_parenthesised(
                rest, returns.end() - 1
            )
            outputs = _parse_parameter_list(outputs_text, False)
            modifiers = rest[: returns.start()].split() + trailer.split()
        else:
            modifiers = rest.split()
    except UnsupportedType as error:
        raise MalformedAbi(f"invalid type in {fragment!r}: {error}") from error

    mutability = "payable" if kind == "receive" else "nonpayable"
    anonymous = False
    for modifier in modifiers:
        if modifier == "constant":
            modifier = "view"
        if modifier in _MUTABILITIES and kind not in ("event", "error"):
            mutability = modifier
        elif modifier == "anonymous" and kind == "event":
            anonymous = True
        elif modifier not in _IGNORED_MODIFIERS:
            raise MalformedAbi(
                f"unexpected modifier {modifier!r} in {fragment!r}"
            )

    if kind == "function":
        entry["outputs"] = outputs
    if kind == "event":
        entry["anonymous"] = anonymous
    elif kind != "error":
        entry["stateMutability"] = mutability
    if kind in ("fallback", "receive"):
        del entry["inputs"]

    return entry


def parse_abi(fragments: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Parse human readable ABI fragments into a JSON ABI.

    Parameters
    ----------
    fragments :
        One declaration per item, e.g.
        `["function number() view returns (uint32)"]`. Blank items are
        skipped.

    Returns
    -------
    abi : `List[Dict[str, Any]]`
        JSON ABI entries, in the order given, suitable for
        `ContractMetadata.from_abi`.

    Raises
    ------
    MalformedAbi
        If any fragment cannot be parsed.
    """
    if isinstance(fragments, str):
        fragments = [fragments]
    return [parse_fragment(f) for f in fragments if f.strip()]
