import sys

from cgtcalc.cli import main

sys.exit(main())
