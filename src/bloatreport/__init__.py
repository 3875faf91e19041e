"""bloatreport - binary size change reports for pull requests."""

__version__ = "0.1.0"
