"""staticshort - declarative HTTP redirect server."""

__version__ = "0.1.0"
