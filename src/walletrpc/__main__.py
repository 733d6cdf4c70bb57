"""Allow `python -m walletrpc`."""

import sys

from walletrpc.main import main

sys.exit(main())
