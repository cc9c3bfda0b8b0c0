import sys

from silviewer.app import main

sys.exit(main())
