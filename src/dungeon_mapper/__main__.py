import sys

from dungeon_mapper.cli import main

sys.exit(main())
