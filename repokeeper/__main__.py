import sys

from repokeeper.cli import main

sys.exit(main())
