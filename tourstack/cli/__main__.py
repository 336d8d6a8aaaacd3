import sys

from tourstack.cli.manage import main

sys.exit(main())
