"""Allow running ddiff with ``python -m ddiff``."""

from .cli import main

main()
