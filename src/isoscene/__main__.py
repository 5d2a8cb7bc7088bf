"""Command-line interface."""
from isoscene.main import main

if __name__ == "__main__":
    main()
