"""Schema conformance checker for the ``users`` table."""

__version__ = "0.1.0"
