"""logcast - device log capture sessions for mobile test automation."""

__version__ = "0.3.0"
