import sys

from wolfi_dev.cli import main

sys.exit(main())
