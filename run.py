import sys

from inrow_exporter.cli import main


if __name__ == "__main__":
    sys.exit(main())
