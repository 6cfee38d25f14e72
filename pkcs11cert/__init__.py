"""X.509 certificate inspection, CRL and signature verification, and supporting utilities."""

__version__ = "0.6.13"