import sys

from handmagic.main import main

sys.exit(main())
