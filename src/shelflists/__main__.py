"""Main entry point for the shelflists package."""

from shelflists.cli import main

if __name__ == "__main__":
    main()
