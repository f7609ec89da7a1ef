import sys

from agentcraft.cli import main

sys.exit(main())
