"""Option layer merge helpers.

"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

HOSTS_KEY = "HOSTS"

def merge_options(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge options.

    Args:
        base (Mapping[str, Any]): Lower-priority option mapping.
        override (Mapping[str, Any]): Higher-priority option mapping.

    Returns:
        Dict[str, Any]: New mapping; ``override`` wins on every shared key. The
        ``HOSTS`` key is folded host-name by host-name, every other key is
        replaced as a whole.

    Raises:
        TypeError: Raised when a ``HOSTS`` value is not a mapping.

    Side Effects / I/O:
        - Primarily performs in-memory transformations; inputs are not mutated.

    Preconditions / Invariants:
        - Nested mappings other than ``HOSTS`` are never merged recursively.

    Examples:
        >>> from labconf.utils.merge import merge_options
        >>> merge_options({"fail_mode": "slow"}, {"fail_mode": "fast"})
        {'fail_mode': 'fast'}

    """
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if key == HOSTS_KEY:
            merged[key] = merge_hosts(merged.get(key), value)
        else:
            merged[key] = value
    return merged

def merge_hosts(
    base: Optional[Mapping[str, Any]], override: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for label, hosts in (("base", base), ("override", override)):
        if hosts is None:
            continue
        if not isinstance(hosts, Mapping):
            raise TypeError(f"'{HOSTS_KEY}' must be a mapping ({label}), got {type(hosts).__name__}.")
        for name, host in hosts.items():
            merged[str(name)] = host
    return merged
