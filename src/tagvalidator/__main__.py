"""Allow ``python -m tagvalidator``."""

import sys

from tagvalidator.cli import main

sys.exit(main())
