"""Daily task tracker with a yearly consistency calendar."""

__version__ = "0.1.0"
