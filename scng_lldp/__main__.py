"""
SCNG LLDP - Module Entry Point.

Allows running the CLI as a module:
    python -m scng_lldp <agent> [<agent> ...]
"""

import sys

from scng_lldp.cli import main

if __name__ == '__main__':
    sys.exit(main())
