"""Allow ``python -m coding_setup``."""

import sys

from coding_setup.cli import main

sys.exit(main())
