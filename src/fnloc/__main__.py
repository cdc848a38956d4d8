"""Allow ``python -m fnloc``."""

import sys

from fnloc.main import main

sys.exit(main())
