"""Allow ``python -m karetech_stack``."""

from karetech_stack.cli import main

main()
