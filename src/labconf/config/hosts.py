"""Host records and default-host assignment.

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from labconf.config.validation import ConfigError, ErrorKind, ensure, validate_default_count
from labconf.utils import as_mapping, as_string_list

LOGGER = logging.getLogger("labconf.config")

_KNOWN_HOST_KEYS = {"roles", "platform", "hypervisor", "ssh", "host_tags", "user"}


@dataclass(frozen=True)
class Platform:
    """Structured platform name such as ``el-6-x86_64`` or ``windows-2012``.

    The first dash-separated segment is the OS family, the second the version
    and everything after that the architecture.
    """

    name: str
    variant: str
    version: str = ""
    arch: str = ""

    @classmethod
    def parse(cls, raw: Any) -> "Platform":
        if isinstance(raw, Platform):
            return raw
        name = str(raw).strip()
        parts = name.split("-", 2)
        return cls(
            name=name,
            variant=parts[0],
            version=parts[1] if len(parts) > 1 else "",
            arch=parts[2] if len(parts) > 2 else "",
        )

    def matches(self, pattern: str) -> bool:
        return re.search(pattern, self.name) is not None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class HostEntry:
    name: str
    platform: Platform
    roles: Tuple[str, ...] = ()
    hypervisor: Optional[str] = None
    ssh: Optional[Dict[str, Any]] = None
    host_tags: Dict[str, Any] = field(default_factory=dict)
    user: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, name: str, raw: Any) -> "HostEntry":
        """From mapping.

        Args:
            name (str): Host name, unique within ``HOSTS``.
            raw (Any): Raw host mapping taken from the merged options.

        Returns:
            HostEntry: Validated host record with its platform parsed.

        Raises:
            ConfigError: Raised when the host is not a mapping or has no platform.

        Side Effects / I/O:
            - Primarily performs in-memory transformations.

        Preconditions / Invariants:
            - Every returned host has a non-empty platform.

        Examples:
            >>> from labconf.config.hosts import HostEntry
            >>> HostEntry.from_mapping("agent", {"platform": "el-6-x86_64", "roles": ["agent"]})

        """
        if not isinstance(raw, Mapping):
            raise ConfigError(
                f"Host '{name}' must be a mapping, got {type(raw).__name__}.",
                kind=ErrorKind.MALFORMED_INPUT,
                subject=name,
            )
        platform = raw.get("platform")
        if platform is None or str(platform).strip() == "":
            raise ConfigError(
                f"Host {name} does not have a platform specified",
                kind=ErrorKind.MALFORMED_INPUT,
                subject=name,
            )
        hypervisor = raw.get("hypervisor")
        ssh = raw.get("ssh")
        user = raw.get("user")
        try:
            ssh_cfg = as_mapping(ssh) if ssh is not None else None
            host_tags = as_mapping(raw.get("host_tags"))
        except TypeError as err:
            raise ConfigError(f"Host {name}: {err}", kind=ErrorKind.MALFORMED_INPUT, subject=name) from err
        return cls(
            name=name,
            platform=Platform.parse(platform),
            roles=tuple(as_string_list(raw.get("roles"))),
            hypervisor=str(hypervisor) if hypervisor is not None else None,
            ssh=ssh_cfg,
            host_tags=host_tags,
            user=str(user) if user is not None else None,
            extra={key: value for key, value in raw.items() if key not in _KNOWN_HOST_KEYS},
        )

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def with_role(self, role: str) -> "HostEntry":
        if self.has_role(role):
            return self
        return replace(self, roles=self.roles + (role,))

    def to_mapping(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra)
        payload["platform"] = self.platform
        payload["roles"] = list(self.roles)
        if self.hypervisor is not None:
            payload["hypervisor"] = self.hypervisor
        if self.ssh is not None:
            payload["ssh"] = dict(self.ssh)
        if self.user is not None:
            payload["user"] = self.user
        payload["host_tags"] = dict(self.host_tags)
        return payload


def choose_default_host(hosts: Mapping[str, HostEntry]) -> Optional[str]:
    """Pick the host that should receive the ``default`` role.

    Returns None when a host already holds ``default`` or when no single
    candidate exists. More than one existing default is a configuration error.
    """
    defaults: List[str] = []
    masters: List[str] = []
    for name, host in hosts.items():
        if host.has_role("default"):
            defaults.append(name)
        elif host.has_role("master"):
            masters.append(name)

    ensure(validate_default_count(defaults))
    if defaults:
        return None
    if len(masters) == 1:
        return masters[0]
    if len(hosts) == 1:
        return next(iter(hosts))
    return None


def set_default_host(hosts: Mapping[str, HostEntry]) -> Dict[str, HostEntry]:
    updated = dict(hosts)
    default_name = choose_default_host(updated)
    if default_name is not None:
        LOGGER.info("Assigning role 'default' to host %s", default_name)
        updated[default_name] = updated[default_name].with_role("default")
    return updated
