"""Explicit coercion helpers for heterogeneous option values.

"""

from __future__ import annotations

from typing import Any, Dict, List


def split_arg(value: Any) -> List[Any]:
    """Split arg into a list.

    Args:
        value (Any): A list, a comma-delimited string, a single scalar or None.

    Returns:
        List[Any]: ``list(value)`` for sequences, ``value.split(",")`` for strings
        containing a comma, ``[]`` for None, otherwise ``[value]``.

    Raises:
        Exception: Propagates unexpected runtime errors from downstream calls.

    Side Effects / I/O:
        - Primarily performs in-memory transformations.

    Preconditions / Invariants:
        - ``split_arg(split_arg(x)) == split_arg(x)`` for every input.
        - Substrings are not trimmed.

    Examples:
        >>> from labconf.utils.values import split_arg
        >>> split_arg("a,b")
        ['a', 'b']

    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str) and "," in value:
        return value.split(",")
    return [value]


def as_string_list(value: Any) -> List[str]:
    """As string list.

    Args:
        value (Any): Raw option value.

    Returns:
        List[str]: ``split_arg(value)`` with every element rendered as ``str``.

    Raises:
        Exception: Propagates unexpected runtime errors from downstream calls.

    Side Effects / I/O:
        - Primarily performs in-memory transformations.

    Preconditions / Invariants:
        - Callers should provide arguments matching annotated types and expected data contracts.

    Examples:
        >>> from labconf.utils.values import as_string_list
        >>> as_string_list(3)
        ['3']

    """
    return [item if isinstance(item, str) else str(item) for item in split_arg(value)]


def as_mapping(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"Expected a mapping, got {type(value).__name__}.")
    return dict(value)


def as_scalar(value: Any, default: Any = None) -> Any:
    if isinstance(value, (list, tuple, dict)):
        raise TypeError(f"Expected a scalar, got {type(value).__name__}.")
    return default if value is None else value
