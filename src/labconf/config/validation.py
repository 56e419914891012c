"""Validation checks for resolved options.

Each ``validate_*`` function is a pure check returning an :class:`Issue` or
``None``. The pipeline driver passes results to :func:`ensure`, which raises
:class:`ConfigError` for the first issue it sees.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

import yaml

VALID_FAIL_MODES = ("fast", "slow", "stop")
VALID_PRESERVE_HOSTS = ("always", "onfail", "onpass", "never")
FRICTIONLESS_ROLE = "frictionless"
FRICTIONLESS_ADDITIONAL_ROLES = ("master", "database", "dashboard", "console")


class ErrorKind(str, Enum):
    MALFORMED_INPUT = "malformed_input"
    INVARIANT_VIOLATION = "invariant_violation"
    RESOURCE_ABSENCE = "resource_absence"


@dataclass(frozen=True)
class Issue:
    kind: ErrorKind
    message: str
    subject: str = ""

    def to_error(self) -> "ConfigError":
        return ConfigError(self.message, kind=self.kind, subject=self.subject)


class ConfigError(ValueError):
    """Raised when the merged options cannot be normalized or validated."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.MALFORMED_INPUT, subject: str = "") -> None:
        super().__init__(message)
        self.kind = kind
        self.subject = subject


def ensure(issue: Optional[Issue]) -> None:
    if issue is not None:
        raise issue.to_error()


def violation(message: str, subject: str = "") -> Issue:
    return Issue(ErrorKind.INVARIANT_VIOLATION, message, subject)


def absent(message: str, subject: str = "") -> Issue:
    return Issue(ErrorKind.RESOURCE_ABSENCE, message, subject)


def validate_default_count(default_hosts: Sequence[str]) -> Optional[Issue]:
    if len(default_hosts) > 1:
        return violation(
            f"Only one host may have the role 'default', default roles assigned to {list(default_hosts)}",
            subject="default",
        )
    return None


def validate_fail_mode(fail_mode: Any) -> Optional[Issue]:
    if fail_mode not in VALID_FAIL_MODES:
        return violation(f"--fail-mode must be one of fast, slow or stop, not '{fail_mode}'", subject="fail_mode")
    return None


def validate_preserve_hosts(setting: Any) -> Optional[Issue]:
    if setting not in VALID_PRESERVE_HOSTS:
        return violation(
            f"--preserve-hosts must be one of always, onfail, onpass or never, not '{setting}'",
            subject="preserve_hosts",
        )
    return None


def validate_frictionless_roles(roles: Sequence[str]) -> Optional[Issue]:
    if FRICTIONLESS_ROLE in roles and set(roles) & set(FRICTIONLESS_ADDITIONAL_ROLES):
        return violation(
            f"Only agent nodes may have the role '{FRICTIONLESS_ROLE}', fix a host with roles {list(roles)}",
            subject=FRICTIONLESS_ROLE,
        )
    return None


def validate_master_count(count: int, host_count: int) -> Optional[Issue]:
    if count > 1:
        return violation("Only one host/node may have the role 'master'.", subject="master")
    if count == 0 and host_count > 1:
        return violation(
            f"One host/node must have the role 'master' when {host_count} hosts are defined.",
            subject="master",
        )
    return None


def validate_restricted_roles(
    host_name: str, platform: str, roles: Iterable[str], disallowed: Sequence[str]
) -> Optional[Issue]:
    if set(roles) & set(disallowed):
        return violation(
            f"{platform} box '{host_name}' may not have roles: {', '.join(disallowed)}.",
            subject=host_name,
        )
    return None


def validate_tags(includes: Sequence[str], excludes: Sequence[str]) -> Optional[Issue]:
    for tag in includes:
        if tag in excludes:
            return violation(
                f"tag '{tag}' cannot be in both the included and excluded tag sets",
                subject=tag,
            )
    return None


def validate_yaml_file(path: Any, context: str) -> Optional[Issue]:
    """Validate yaml file.

    Args:
        path (Any): Path to a YAML file that must exist.
        context (str): Short reason shown in the error, e.g. ``required by blimpy``.

    Returns:
        Optional[Issue]: A resource-absence issue when the file is missing or not valid YAML.

    Raises:
        Exception: Propagates unexpected runtime errors from downstream calls.

    Side Effects / I/O:
        - Reads the file from the local filesystem.

    Preconditions / Invariants:
        - Callers should provide arguments matching annotated types and expected data contracts.

    Examples:
        >>> from labconf.config.validation import validate_yaml_file
        >>> validate_yaml_file("~/.fog", "required by vcloud")

    """
    if not path:
        return absent(f"no file configured ({context})", subject=context)
    resolved = Path(str(path)).expanduser()
    if not resolved.is_file():
        return absent(f"{path} does not exist ({context})", subject=str(path))
    try:
        with resolved.open("r", encoding="utf-8") as handle:
            yaml.safe_load(handle)
    except yaml.YAMLError as err:
        return absent(f"{path} is not a valid YAML file ({context})\n\t{err}", subject=str(path))
    return None


def resolve_symlinks(options: Dict[str, Any]) -> Dict[str, Any]:
    resolved = dict(options)
    hosts_file = resolved.get("hosts_file")
    if hosts_file and os.path.exists(str(hosts_file)):
        resolved["hosts_file"] = os.path.realpath(str(hosts_file))
    return resolved


def first_issue(issues: Iterable[Optional[Issue]]) -> Optional[Issue]:
    for issue in issues:
        if issue is not None:
            return issue
    return None

