"""
Entry Point Script (Bootstrap)
==============================
Development runner for the scene preview.

Why is this file needed?
------------------------
1. It is located outside the 'src' package to act as a convenient runner.
2. It modifies 'sys.path' to ensure Python can resolve imports like
   'from isoscene.model...' without installing the package.

Usage:
    $ python run.py [scene.json] [--rotate-x 60 --rotate-z 45 --time 2 --output out.png]
"""
import sys
import os

current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from isoscene.main import main

if __name__ == "__main__":
    main()
