"""Allow ``python -m bugblaze``."""

from bugblaze.cli import main

main()
