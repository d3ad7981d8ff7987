import sys

from oneinch_sdk.cli import main


sys.exit(main())
