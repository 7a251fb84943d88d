import sys

from trailwake.cli import main

sys.exit(main())
