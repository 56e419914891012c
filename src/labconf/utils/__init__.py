from labconf.utils.env import env_flag, env_int, env_value
from labconf.utils.logging import resolve_log_level, setup_logging
from labconf.utils.merge import HOSTS_KEY, merge_hosts, merge_options
from labconf.utils.values import as_mapping, as_scalar, as_string_list, split_arg

__all__ = [
    "env_flag",
    "env_int",
    "env_value",
    "resolve_log_level",
    "setup_logging",
    "HOSTS_KEY",
    "merge_hosts",
    "merge_options",
    "as_mapping",
    "as_scalar",
    "as_string_list",
    "split_arg",
]
