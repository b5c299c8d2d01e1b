"""Allow running parallel-harness with ``python -m parallel_harness``."""

from __future__ import annotations

import sys

from parallel_harness.cli import main


if __name__ == '__main__':
    sys.exit(main())
