"""NFL loser pool core."""

__version__ = "0.1.0"
