"""
Pantry kitchen inventory service.

Tracks stock items, their quantities and costs, with an append-only audit trail.
"""

__version__ = "0.1.0"
