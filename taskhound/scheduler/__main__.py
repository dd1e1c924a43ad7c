"""Entry point for running the scheduler loop directly.

Usage: python -m taskhound.scheduler [--heartbeat SECONDS] [--duration SECONDS]
"""

import sys

from taskhound.scheduler.cli import main

if __name__ == "__main__":
    sys.exit(main())
