"""Investment tracker backend: live valuation and portfolio history."""

__version__ = "1.0.0"
