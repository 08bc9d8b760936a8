import sys

from gcptables.cli import main

sys.exit(main())
