"""Executable entrypoint for `python -m labconf`.

Delegates directly to :func:`labconf.cli.main`.
"""

from labconf.cli import main

if __name__ == "__main__":
    main()
