"""Allow `python -m hackscene`."""

import sys

from hackscene.cli import main

sys.exit(main())
