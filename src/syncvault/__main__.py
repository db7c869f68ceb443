"""syncvault: syncvault/__main__.py.

Mirror a set of directories into a backup root with parallel rsync.
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
