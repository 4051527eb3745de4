"""tputfmt Main

This specifies the entrypoint of the tputfmt module when run as executable.
"""

import sys

from tputfmt.main_cli import tputfmt_cli as main

if __name__ == "__main__":
    r = main()
    sys.exit(r)
