"""Allow `python -m cherrybridge`."""

import sys

from cherrybridge.main import main

if __name__ == "__main__":
    sys.exit(main())
