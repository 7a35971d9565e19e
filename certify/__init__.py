"""Certify: innovation-maturity scoring and certification engine."""

__version__ = "0.1.0"
