"""Allow running the CLI as a module: python -m agent_cli."""

import sys

from agent_cli.runner import main

if __name__ == "__main__":
    sys.exit(main())
