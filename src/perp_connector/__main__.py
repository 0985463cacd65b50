"""Allow running with `python -m perp_connector`."""

import sys

from perp_connector.main import main

sys.exit(main())
