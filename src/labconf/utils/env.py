"""Environment variable parsing helpers.

"""

from __future__ import annotations

import os
from typing import Mapping, Optional, Sequence

_FALSE_VALUES = {"0", "false", "no", "off"}

def env_value(names: Sequence[str], environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Env value.

    Args:
        names (Sequence[str]): Candidate variable names, checked in order.
        environ (Optional[Mapping[str, str]]): Environment to read; defaults to ``os.environ``.

    Returns:
        Optional[str]: First non-empty value, or None when every name is unset or empty.

    Raises:
        Exception: Propagates unexpected runtime errors from downstream calls.

    Side Effects / I/O:
        - May read environment variables.

    Preconditions / Invariants:
        - Callers should provide arguments matching annotated types and expected data contracts.

    Examples:
        >>> from labconf.utils.env import env_value
        >>> env_value(["PE_VER", "pe_ver"], {"pe_ver": "3.1"})
        '3.1'

    """
    source = os.environ if environ is None else environ
    for name in names:
        raw = source.get(name)
        if raw is not None and raw.strip() != "":
            return raw
    return None

def env_flag(raw: str) -> bool:
    """Env flag.

    Args:
        raw (str): Raw environment value.

    Returns:
        bool: False for ``0``, ``false``, ``no`` and ``off`` (any case), True otherwise.

    Raises:
        Exception: Propagates unexpected runtime errors from downstream calls.

    Side Effects / I/O:
        - Primarily performs in-memory transformations.

    Preconditions / Invariants:
        - Callers should provide arguments matching annotated types and expected data contracts.

    Examples:
        >>> from labconf.utils.env import env_flag
        >>> env_flag("off")
        False

    """
    return raw.strip().lower() not in _FALSE_VALUES

def env_int(raw: str) -> int:
    return int(raw.strip())
