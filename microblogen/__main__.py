"""Main entry point for the microblogen CLI."""

from microblogen.cli import main

if __name__ == "__main__":
    main()
