"""Allow `python -m tronsigner`."""

import sys

from tronsigner.main import main

sys.exit(main())
