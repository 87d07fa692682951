import sys

from sharewatch.cli import main

sys.exit(main())
