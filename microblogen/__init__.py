"""microblogen: static blog generator for microCMS content."""

__version__ = "2.0.1"
