"""Option merging, normalization and validation pipeline.

"""

from __future__ import annotations

import argparse
import glob
import logging
import os
import re
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from labconf.config.defaults import (
    EC2_HYPERVISORS,
    FOG_HYPERVISORS,
    GIT_REPO,
    LIST_OPTIONS,
    RB_FILE_OPTIONS,
    RESTRICTED_PLATFORM_PATTERN,
    RESTRICTED_PLATFORM_ROLES,
    presets,
)
from labconf.config.hosts import HostEntry, set_default_host
from labconf.config.sources import (
    command_line_options,
    env_options,
    invocation_string,
    read_hosts_file,
    read_options_file,
)
from labconf.config.validation import (
    ConfigError,
    ErrorKind,
    Issue,
    absent,
    ensure,
    first_issue,
    resolve_symlinks,
    validate_default_count,
    validate_fail_mode,
    validate_frictionless_roles,
    validate_master_count,
    validate_preserve_hosts,
    validate_restricted_roles,
    validate_tags,
    validate_yaml_file,
)
from labconf.utils import HOSTS_KEY, as_mapping, as_scalar, merge_options, split_arg

LOGGER = logging.getLogger("labconf.config")

RoleCheck = Callable[[Sequence[str]], Optional[Issue]]

_GIT_KEYWORDS = ("PUPPET", "FACTER", "HIERA", "HIERA-PUPPET")

def merge_layers(
    presets_layer: Mapping[str, Any],
    options_file_layer: Mapping[str, Any],
    hosts_file_layer: Mapping[str, Any],
    command_line_layer: Mapping[str, Any],
    environment_layer: Mapping[str, Any],
    command_line: Optional[str] = None,
) -> Dict[str, Any]:
    """Merge the five option layers.

    Args:
        presets_layer (Mapping[str, Any]): Built-in presets, lowest priority.
        options_file_layer (Mapping[str, Any]): Contents of the options file.
        hosts_file_layer (Mapping[str, Any]): Hosts file ``CONFIG`` section plus ``HOSTS``.
        command_line_layer (Mapping[str, Any]): Options given on the command line.
        environment_layer (Mapping[str, Any]): Options read from environment variables, highest priority.
        command_line (Optional[str]): Literal invocation string stored under ``command_line``.

    Returns:
        Dict[str, Any]: New merged mapping. Effective precedence is
        environment > command line > hosts file > options file > presets.

    Raises:
        ConfigError: Raised when a ``HOSTS`` layer value is not a mapping.

    Side Effects / I/O:
        - Primarily performs in-memory transformations; no layer is mutated.

    Preconditions / Invariants:
        - Values are replaced, never merged recursively; ``HOSTS`` is folded by host name.
        - ``command_line`` cannot be overridden by any layer.

    Examples:
        >>> from labconf.config.loader import merge_layers
        >>> merge_layers({"fail_mode": "slow"}, {"fail_mode": "stop"}, {}, {"fail_mode": "fast"}, {})["fail_mode"]
        'fast'

    """
    cli_layer: Dict[str, Any] = dict(command_line_layer)
    if command_line is not None:
        cli_layer["command_line"] = command_line

    merged: Dict[str, Any] = {}
    for layer in (presets_layer, options_file_layer, hosts_file_layer, cli_layer, environment_layer):
        try:
            merged = merge_options(merged, layer)
        except TypeError as err:
            raise ConfigError(str(err), kind=ErrorKind.MALFORMED_INPUT, subject=HOSTS_KEY) from err
    if command_line is not None:
        merged["command_line"] = command_line
    return merged

def file_list(paths: Sequence[str]) -> List[str]:
    """File list.

    Args:
        paths (Sequence[str]): Files and directories holding ``.rb`` test files.

    Returns:
        List[str]: Files kept as given, directories expanded to their ``.rb`` files
        sorted by ``(depth, path)``.

    Raises:
        ConfigError: Raised when a directory holds no ``.rb`` files, an entry is
            neither a file nor a directory, or no files are found at all.

    Side Effects / I/O:
        - Walks the local filesystem.

    Preconditions / Invariants:
        - Callers should provide arguments matching annotated types and expected data contracts.

    Examples:
        >>> from labconf.config.loader import file_list
        >>> file_list(["tests/acceptance"])

    """
    files: List[str] = []
    for root in paths:
        root = str(root)
        if os.path.isfile(root):
            files.append(root)
        elif os.path.isdir(root):
            discovered = [
                path
                for path in glob.glob(os.path.join(root, "**", "*.rb"), recursive=True)
                if os.path.isfile(path)
            ]
            if not discovered:
                ensure(absent(f"empty directory used as an option ({root})!", subject=root))
            files.extend(sorted(discovered, key=lambda path: (path.count("/"), path)))
        else:
            ensure(absent(f"{root} used as a file option but is not a file or directory!", subject=root))
    if not files:
        ensure(absent(f"no .rb files found in {list(paths)}", subject=str(list(paths))))
    return files

def parse_git_repos(entries: Sequence[str], repo: str = GIT_REPO) -> List[str]:
    """Expand ``PUPPET/<ref>`` style keywords into git URLs.

    ``HIERA-PUPPET/3.0`` becomes ``<repo>/hiera-puppet.git#3.0``; entries that
    do not start with a known keyword are returned unchanged.
    """
    expanded: List[str] = []
    for entry in entries:
        text = str(entry)
        for keyword in _GIT_KEYWORDS:
            if re.match(rf"^{re.escape(keyword)}/", text):
                text = f"{repo}/{keyword.lower()}.git#{text.split('/', 1)[1]}"
                break
        expanded.append(text)
    return expanded

def normalize_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = dict(options)

    if "keyfile" in normalized:
        ssh_cfg = _coerce_option("ssh", as_mapping, normalized.get("ssh"))
        ssh_cfg["keys"] = [normalized["keyfile"]]
        normalized["ssh"] = ssh_cfg

    for key in LIST_OPTIONS:
        values = split_arg(normalized.get(key))
        if key in RB_FILE_OPTIONS and values:
            values = file_list(values)
        if key == "install":
            values = parse_git_repos(values)
        normalized[key] = values
        LOGGER.debug("Normalized %s: %s", key, values)

    ensure(validate_fail_mode(_scalar_option(normalized, "fail_mode")))
    ensure(validate_preserve_hosts(_scalar_option(normalized, "preserve_hosts")))
    return normalized

def _coerce_option(key: str, coerce: Callable[[Any], Any], value: Any) -> Any:
    try:
        return coerce(value)
    except TypeError as err:
        raise ConfigError(f"`{key}` is malformed: {err}", kind=ErrorKind.MALFORMED_INPUT, subject=key) from err

def _scalar_option(options: Mapping[str, Any], key: str) -> Any:
    try:
        return as_scalar(options.get(key))
    except TypeError as err:
        raise ConfigError(
            f"`{key}` must be a single value: {err}", kind=ErrorKind.MALFORMED_INPUT, subject=key
        ) from err

def normalize_tags(options: Mapping[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = dict(options)
    for key in ("tag_includes", "tag_excludes"):
        raw = normalized.get(key) or ""
        tags = raw.split(",") if isinstance(raw, str) else _coerce_option(key, list, raw)
        tags = [str(tag).lower() for tag in tags]
        # trailing empty fragments are dropped, inner ones kept
        while tags and tags[-1] == "":
            tags.pop()
        normalized[key] = tags
    ensure(validate_tags(normalized["tag_includes"], normalized["tag_excludes"]))
    return normalized

def build_hosts(options: Mapping[str, Any]) -> Dict[str, HostEntry]:
    raw_hosts = _coerce_option(HOSTS_KEY, as_mapping, options.get(HOSTS_KEY))
    hosts = {str(name): HostEntry.from_mapping(str(name), raw) for name, raw in raw_hosts.items()}
    ensure(validate_default_count([name for name, host in hosts.items() if host.has_role("default")]))
    return hosts

def validate_hosts(
    options: Mapping[str, Any],
    hosts: Mapping[str, HostEntry],
    frictionless_check: RoleCheck = validate_frictionless_roles,
) -> Dict[str, HostEntry]:
    """Validate hosts and return repaired copies.

    Checks hypervisor credential files, the master count, frictionless roles and
    restricted platforms; promotes ``ssh.user`` and merges the global
    ``host_tags`` under each host's own tags.
    """
    hypervisors: List[str] = []
    for host in hosts.values():
        visor = host.hypervisor or ""
        if visor not in hypervisors:
            hypervisors.append(visor)
    for visor in hypervisors:
        ensure(check_hypervisor_config(options, visor))

    masters = sum(1 for host in hosts.values() if host.has_role("master"))
    ensure(first_issue(frictionless_check(list(host.roles)) for host in hosts.values()))
    ensure(validate_master_count(masters, len(hosts)))

    global_tags = _coerce_option("host_tags", as_mapping, options.get("host_tags"))
    repaired: Dict[str, HostEntry] = {}
    for name, host in hosts.items():
        if host.platform.matches(RESTRICTED_PLATFORM_PATTERN):
            ensure(validate_restricted_roles(name, str(host.platform), host.roles, RESTRICTED_PLATFORM_ROLES))

        user = host.user
        if host.ssh and host.ssh.get("user"):
            user = str(host.ssh["user"])

        tags = dict(global_tags)
        tags.update(host.host_tags)
        repaired[name] = replace(host, host_tags=tags, user=user)
    return repaired

def check_hypervisor_config(options: Mapping[str, Any], visor: str) -> Optional[Issue]:
    if visor in EC2_HYPERVISORS:
        return validate_yaml_file(options.get("ec2_yaml"), f"required by {visor}")
    if visor in FOG_HYPERVISORS:
        return validate_yaml_file(options.get("dot_fog"), f"required by {visor}")
    return None

def resolve_options(
    presets_layer: Mapping[str, Any],
    options_file_layer: Mapping[str, Any],
    hosts_file_layer: Mapping[str, Any],
    command_line_layer: Mapping[str, Any],
    environment_layer: Mapping[str, Any],
    command_line: Optional[str] = None,
    frictionless_check: RoleCheck = validate_frictionless_roles,
) -> Dict[str, Any]:
    """Resolve options.

    Args:
        presets_layer (Mapping[str, Any]): Built-in presets.
        options_file_layer (Mapping[str, Any]): Options file contents.
        hosts_file_layer (Mapping[str, Any]): Hosts file contents.
        command_line_layer (Mapping[str, Any]): Command-line options.
        environment_layer (Mapping[str, Any]): Environment options.
        command_line (Optional[str]): Literal invocation string.
        frictionless_check (RoleCheck): Predicate applied to every host's roles.

    Returns:
        Dict[str, Any]: Merged, normalized and validated options; ``HOSTS`` values
        are plain mappings whose ``platform`` is a :class:`Platform`.

    Raises:
        ConfigError: Raised on the first malformed input, invariant violation or
            missing resource.

    Side Effects / I/O:
        - May read from local filesystem artifacts.

    Preconditions / Invariants:
        - Every host has a platform; exactly zero or one host carries ``default``.

    Examples:
        >>> from labconf.config.loader import resolve_options
        >>> resolve_options(presets(), {}, {"HOSTS": {"box": {"platform": "el-6-x86_64"}}}, {}, {})

    """
    merged = merge_layers(
        presets_layer,
        options_file_layer,
        hosts_file_layer,
        command_line_layer,
        environment_layer,
        command_line=command_line,
    )
    hosts = build_hosts(merged)
    normalized = normalize_options(merged)
    hosts = validate_hosts(normalized, hosts, frictionless_check=frictionless_check)
    normalized = normalize_tags(normalized)
    normalized = resolve_symlinks(normalized)
    hosts = set_default_host(hosts)
    normalized[HOSTS_KEY] = {name: host.to_mapping() for name, host in hosts.items()}
    LOGGER.debug("Resolved %d option(s) for %d host(s)", len(normalized), len(hosts))
    return normalized

def load_options(
    namespace: argparse.Namespace,
    argv: Sequence[str] = (),
    prog: str = "labconf",
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Read every source and resolve the run options.

    The options file named on the command line is read first, then the hosts
    file named by the command line, options file or presets.
    """
    preset_values = presets()
    cli_values = command_line_options(namespace)
    env_values = env_options(environ)
    file_values = read_options_file(cli_values.get("options_file"))

    hosts_file = (
        cli_values.get("hosts_file")
        or file_values.get("hosts_file")
        or preset_values.get("hosts_file")
    )
    hosts_values = read_hosts_file(hosts_file)

    return resolve_options(
        preset_values,
        file_values,
        hosts_values,
        cli_values,
        env_values,
        command_line=invocation_string(prog, argv),
    )
