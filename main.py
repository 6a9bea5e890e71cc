# main.py

import sys

from idscan.cli import main

if __name__ == "__main__":
    sys.exit(main())
