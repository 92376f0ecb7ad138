"""Call-record extract loader."""

__version__ = "1.0.0"
