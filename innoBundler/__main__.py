"""Allow ``python -m innoBundler``."""

from innoBundler.cli import main

main()
