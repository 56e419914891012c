"""Preset option values for labconf.

"""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any, Dict, Tuple

GIT_REPO = "git://github.com/puppetlabs"

# These options can have the form of arg1,arg2 or [arg] or just arg.
LIST_OPTIONS: Tuple[str, ...] = ("helper", "load_path", "tests", "pre_suite", "post_suite", "install", "modules")
# These options expand out into a list of .rb files.
RB_FILE_OPTIONS: Tuple[str, ...] = ("tests", "pre_suite", "post_suite")

RESTRICTED_PLATFORM_PATTERN = r"windows|el-4"
RESTRICTED_PLATFORM_ROLES: Tuple[str, ...] = ("master", "database", "dashboard")

EC2_HYPERVISORS: Tuple[str, ...] = ("blimpy",)
FOG_HYPERVISORS: Tuple[str, ...] = ("aix", "solaris", "vcloud")

PRESETS: Dict[str, Any] = {
    "project": "labconf",
    "department": "unknown",
    "validate": True,
    "log_level": "verbose",
    "log_dir": "log",
    "trace_limit": 10,
    "hosts_file": "sample.cfg",
    "options_file": None,
    "type": "pe",
    "provision": True,
    "preserve_hosts": "never",
    "root_keys": False,
    "quiet": False,
    "xml_dir": "junit",
    "xml_file": "junit.xml",
    "xml_stylesheet": "junit.xsl",
    "color": True,
    "dry_run": False,
    "timeout": 300,
    "fail_mode": "slow",
    "timesync": False,
    "repo_proxy": False,
    "package_proxy": False,
    "add_el_extras": False,
    "consoleport": 443,
    "pe_dir": None,
    "pe_version_file": "LATEST",
    "pe_version_file_win": "LATEST-win",
    "dot_fog": os.path.join(os.path.expanduser("~"), ".fog"),
    "ec2_yaml": "config/image_templates/ec2.yaml",
    "help": False,
    "collect_perf_data": False,
    "ssh": {
        "config": False,
        "paranoid": False,
        "timeout": 300,
        "auth_methods": ["publickey"],
        "port": 22,
        "forward_agent": True,
        "keys": ["~/.ssh/id_rsa"],
        "user_known_hosts_file": "~/.ssh/known_hosts",
    },
    "host_tags": {},
    "HOSTS": {},
}


def presets() -> Dict[str, Any]:
    return deepcopy(PRESETS)
