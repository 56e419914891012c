from labconf.config.defaults import GIT_REPO, LIST_OPTIONS, PRESETS, RB_FILE_OPTIONS, presets
from labconf.config.hosts import HostEntry, Platform, choose_default_host, set_default_host
from labconf.config.loader import (
    build_hosts,
    file_list,
    load_options,
    merge_layers,
    normalize_options,
    normalize_tags,
    parse_git_repos,
    resolve_options,
    validate_hosts,
)
from labconf.config.sources import env_options, read_hosts_file, read_options_file
from labconf.config.validation import ConfigError, ErrorKind, Issue

__all__ = [
    "GIT_REPO",
    "LIST_OPTIONS",
    "PRESETS",
    "RB_FILE_OPTIONS",
    "presets",
    "HostEntry",
    "Platform",
    "choose_default_host",
    "set_default_host",
    "build_hosts",
    "file_list",
    "load_options",
    "merge_layers",
    "normalize_options",
    "normalize_tags",
    "parse_git_repos",
    "resolve_options",
    "validate_hosts",
    "env_options",
    "read_hosts_file",
    "read_options_file",
    "ConfigError",
    "ErrorKind",
    "Issue",
]
