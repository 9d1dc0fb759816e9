"""Main entry point for running tgridsplit as a module."""

import sys

from tgridsplit.cli.app import main

if __name__ == "__main__":
    sys.exit(main())
