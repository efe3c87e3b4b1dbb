#!/usr/bin/env python3
"""
Dungeon Mapper - Command-line Entry Point

Runs the map command-line tool from a source checkout without installing.
"""

import sys
from pathlib import Path


def main():
    """Main application entry point."""
    # Ensure package imports work when executed as a script
    src_root = Path(__file__).resolve().parent / "src"
    if str(src_root) not in sys.path:
        sys.path.insert(0, str(src_root))

    from dungeon_mapper.cli import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
