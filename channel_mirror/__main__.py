import sys

from channel_mirror.app import main

sys.exit(main())
