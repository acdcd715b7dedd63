import sys

from scriptshell.app import main

sys.exit(main())
