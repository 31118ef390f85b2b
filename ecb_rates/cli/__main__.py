"""Allow ``python -m ecb_rates.cli`` execution."""

import sys

from ecb_rates.cli.rates import main

sys.exit(main())
