import sys

from s3edit.cli import main

sys.exit(main())
