# 17.10.26

import sys

from MovieDownloader.cli.run import main


if __name__ == "__main__":
    sys.exit(main())
