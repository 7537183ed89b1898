import sys

from hardtype.cli import main

sys.exit(main())
