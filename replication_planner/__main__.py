import sys

from replication_planner.cli import main

sys.exit(main())
