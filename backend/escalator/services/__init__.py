"""
Application Services

Services contain the business logic that sits between API routes and data access.
"""

from . import filters

__all__ = ["filters"]
