"""Public package entrypoints for labconf.

This module defines the stable, top-level APIs intended for external callers.
"""

from __future__ import annotations

from labconf.config import ConfigError, load_options, resolve_options
from labconf.utils import split_arg

__all__ = ["load_options", "resolve_options", "split_arg", "ConfigError"]
__version__ = "0.1.0"
