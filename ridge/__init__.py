"""Architecture graph analysis and drift detection."""

__version__ = "0.1.0"