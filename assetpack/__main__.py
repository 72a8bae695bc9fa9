import sys

from assetpack.cli import main

sys.exit(main())
