import sys

from cforge.runner import main

sys.exit(main())
