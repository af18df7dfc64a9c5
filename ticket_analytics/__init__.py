"""Ingestion and derived analytics for fuel-operations and after-sales tickets."""

__version__ = "0.1.0"
