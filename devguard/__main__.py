import sys

from devguard.cli import main

sys.exit(main())
