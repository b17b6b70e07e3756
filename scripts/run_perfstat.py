import sys
from perfstat_compare.cli import main

if __name__ == "__main__":
    sys.exit(main())
