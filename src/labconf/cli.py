from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from labconf.config import PRESETS, ConfigError, Platform, load_options
from labconf.utils import HOSTS_KEY, resolve_log_level, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="labconf", description="Resolve test-run options")
    subparsers = parser.add_subparsers(dest="command", required=True)

    options_parser = argparse.ArgumentParser(add_help=False)
    options_parser.add_argument("--hosts", dest="hosts_file", default=None, help="Path to the hosts file.")
    options_parser.add_argument("--options-file", default=None, help="YAML file with additional options.")
    options_parser.add_argument("--type", default=None, help="Installation type (e.g. pe, foss).")
    options_parser.add_argument("--helper", default=None, help="Comma-separated helper files.")
    options_parser.add_argument("--load-path", default=None, help="Comma-separated load paths.")
    options_parser.add_argument("--tests", default=None, help="Comma-separated test files or directories.")
    options_parser.add_argument("--pre-suite", default=None, help="Comma-separated pre-suite files or directories.")
    options_parser.add_argument("--post-suite", default=None, help="Comma-separated post-suite files or directories.")
    options_parser.add_argument(
        "--install",
        default=None,
        help="Comma-separated repositories to install; PUPPET/<ref>, FACTER/<ref>, HIERA/<ref> are expanded.",
    )
    options_parser.add_argument("--modules", default=None, help="Comma-separated modules to install.")
    options_parser.add_argument("--keyfile", default=None, help="SSH key used for every host.")
    options_parser.add_argument(
        "--fail-mode",
        default=None,
        choices=["fast", "slow", "stop"],
        help="How to proceed after a test failure.",
    )
    options_parser.add_argument(
        "--preserve-hosts",
        default=None,
        choices=["always", "onfail", "onpass", "never"],
        help="When to keep provisioned hosts after the run.",
    )
    options_parser.add_argument("--tag", dest="tag_includes", default=None, help="Run only tests with these tags.")
    options_parser.add_argument("--exclude-tags", dest="tag_excludes", default=None, help="Skip tests with these tags.")
    options_parser.add_argument("--log-level", default=None, help="trace, debug, verbose, info, notify or warn.")
    options_parser.add_argument("--log-dir", default=None, help="Directory for run.log.")

    subparsers.add_parser(
        "resolve",
        parents=[options_parser],
        help="Print the resolved options as YAML",
    )
    subparsers.add_parser(
        "hosts",
        parents=[options_parser],
        help="Print each host with its platform and roles",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        Path(args.log_dir or PRESETS["log_dir"]),
        resolve_log_level(args.log_level or PRESETS["log_level"]),
    )

    try:
        options = load_options(args, argv=argv, prog=parser.prog)
    except ConfigError as err:
        raise SystemExit(f"labconf {args.command} failed: {err}") from None

    setup_logging(
        Path(str(options.get("log_dir") or PRESETS["log_dir"])),
        resolve_log_level(options.get("log_level") or PRESETS["log_level"]),
    )

    if args.command == "resolve":
        sys.stdout.write(yaml.safe_dump(_plain(options), sort_keys=True))
        return

    if args.command == "hosts":
        for name, host in options[HOSTS_KEY].items():
            sys.stdout.write(f"{name}\t{host['platform']}\t{','.join(host['roles'])}\n")
        return

    parser.error(f"Unknown command: {args.command}")


def _plain(value: Any) -> Any:
    if isinstance(value, Platform):
        return str(value)
    if isinstance(value, dict):
        plain: Dict[str, Any] = {str(key): _plain(item) for key, item in value.items()}
        return plain
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
