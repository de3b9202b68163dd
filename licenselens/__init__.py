"""Activate, verify and inspect signed software license keys from a licensing web API."""

__version__ = "0.1.0"

__all__ = ["client", "errors", "machine_code", "models", "parser", "request", "signature"]