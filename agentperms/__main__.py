import sys

from agentperms.cli import main

sys.exit(main())
