"""Allow ``python -m depkit``."""

from depkit.cli import main

main()
