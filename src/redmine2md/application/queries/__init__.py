"""
Queries - Read-only operations.
"""

from .connectivity import ConnectivityResult, check_connectivity

__all__ = ["ConnectivityResult", "check_connectivity"]
