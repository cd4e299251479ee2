"""Module entry point for running catalog_lens as a package.

Allows: python -m catalog_lens <command>
"""

from catalog_lens.cli import main
import sys

if __name__ == '__main__':
    sys.exit(main())
