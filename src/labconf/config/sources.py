"""Readers that turn raw option sources into plain mappings.

"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from labconf.config.validation import ConfigError, ErrorKind
from labconf.utils import HOSTS_KEY, env_flag, env_int, env_value

LOGGER = logging.getLogger("labconf.sources")

CONFIG_SECTION = "CONFIG"

_ENV_MAP: Tuple[Tuple[Tuple[str, ...], str, Callable[[str], Any]], ...] = (
    (("IS_PE", "is_pe"), "is_pe", env_flag),
    (("PE_DIST_DIR", "pe_dist_dir"), "pe_dir", str),
    (("PE_VERSION_FILE", "pe_version_file"), "pe_version_file", str),
    (("PE_VER", "pe_ver"), "pe_ver", str),
    (("PUPPET_VER", "puppet_ver"), "puppet_ver", str),
    (("FACTER_VER", "facter_ver"), "facter_ver", str),
    (("HIERA_VER", "hiera_ver"), "hiera_ver", str),
    (("HIERA_PUPPET_VER", "hiera_puppet_ver"), "hiera_puppet_ver", str),
    (("CONSOLEPORT", "consoleport"), "consoleport", env_int),
)


def env_options(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Env options.

    Args:
        environ (Optional[Mapping[str, str]]): Environment to read; defaults to ``os.environ``.

    Returns:
        Dict[str, Any]: Option mapping holding only the variables that are set and castable.

    Raises:
        Exception: Propagates unexpected runtime errors from downstream calls.

    Side Effects / I/O:
        - May read environment variables.

    Preconditions / Invariants:
        - Empty values are ignored; values that fail their cast are logged and skipped.

    Examples:
        >>> from labconf.config.sources import env_options
        >>> env_options({"IS_PE": "true"})
        {'is_pe': True, 'type': 'pe'}

    """
    options: Dict[str, Any] = {}
    for names, key, caster in _ENV_MAP:
        raw = env_value(names, environ)
        if raw is None:
            continue
        try:
            options[key] = caster(raw)
        except (TypeError, ValueError):
            LOGGER.warning("Ignoring %s=%r: cannot be read as %s", names[0], raw, key)
    if options.get("is_pe"):
        options["type"] = "pe"
    return options


def command_line_options(namespace: argparse.Namespace) -> Dict[str, Any]:
    return {key: value for key, value in vars(namespace).items() if value is not None and key != "command"}


def read_options_file(path: str | Path | None) -> Dict[str, Any]:
    if path is None:
        return {}
    options_path = Path(path).expanduser()
    if not options_path.is_file():
        raise ConfigError(
            f"Specified options file '{path}' does not exist!",
            kind=ErrorKind.RESOURCE_ABSENCE,
            subject=str(path),
        )
    loaded = _load_yaml(options_path)
    if not isinstance(loaded, dict):
        raise ConfigError(
            f"Options file '{path}' must contain a YAML mapping.",
            kind=ErrorKind.MALFORMED_INPUT,
            subject=str(path),
        )
    LOGGER.debug("Read %d option(s) from %s", len(loaded), options_path)
    return loaded


def read_hosts_file(path: str | Path | None) -> Dict[str, Any]:
    """Read hosts file.

    Args:
        path (str | Path | None): Path to a YAML hosts file.

    Returns:
        Dict[str, Any]: ``{"HOSTS": ...}`` merged with the file's ``CONFIG`` section.

    Raises:
        ConfigError: Raised when the file is missing, unreadable or lacks a ``HOSTS`` mapping.

    Side Effects / I/O:
        - May read from local filesystem artifacts.

    Preconditions / Invariants:
        - ``CONFIG`` keys never shadow ``HOSTS``.

    Examples:
        >>> from labconf.config.sources import read_hosts_file
        >>> read_hosts_file(...)

    """
    if path is None or not Path(path).expanduser().is_file():
        raise ConfigError(f"{path} is not a valid path", kind=ErrorKind.RESOURCE_ABSENCE, subject=str(path))
    hosts_path = Path(path).expanduser()
    loaded = _load_yaml(hosts_path) or {}
    if not isinstance(loaded, dict) or not isinstance(loaded.get(HOSTS_KEY), dict):
        raise ConfigError(
            f"Hosts file '{path}' must define a '{HOSTS_KEY}' mapping.",
            kind=ErrorKind.MALFORMED_INPUT,
            subject=str(path),
        )
    config = loaded.get(CONFIG_SECTION) or {}
    if not isinstance(config, dict):
        raise ConfigError(
            f"'{CONFIG_SECTION}' in hosts file '{path}' must be a mapping.",
            kind=ErrorKind.MALFORMED_INPUT,
            subject=str(path),
        )
    options: Dict[str, Any] = {key: value for key, value in config.items() if key != HOSTS_KEY}
    options[HOSTS_KEY] = dict(loaded[HOSTS_KEY])
    LOGGER.debug("Read %d host(s) from %s", len(options[HOSTS_KEY]), hosts_path)
    return options


def invocation_string(prog: str, argv: Sequence[str]) -> str:
    return " ".join([prog, *argv])


def _load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except yaml.YAMLError as err:
        raise ConfigError(
            f"{path} is not a valid YAML file\n\t{err}",
            kind=ErrorKind.MALFORMED_INPUT,
            subject=str(path),
        ) from err
