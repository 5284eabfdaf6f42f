"""Allow `python -m dsci_ml`."""

import sys

from dsci_ml.cli import main

sys.exit(main())
