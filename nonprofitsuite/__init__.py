"""NonprofitSuite back-office service."""

__version__ = "1.0.0"
