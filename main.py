#!/usr/bin/env python3
"""
main.py - Quick-start entry point.

Drop tile images into ``tiles/`` and run:

    python main.py build my_photo.jpg

Or use the full CLI:

    python -m tile_mosaic.cli build --help
    python -m tile_mosaic.cli tiles --tiles tiles/
"""

from tile_mosaic.cli import app

if __name__ == "__main__":
    app()
