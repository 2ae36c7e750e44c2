"""Allow running as: python -m presaleswap."""

import sys

from presaleswap.cli import main

sys.exit(main())
