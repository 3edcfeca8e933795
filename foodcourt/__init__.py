"""
                Campus Food Court API

HTTP JSON backend exposing vendors, menus and orders for a campus
food-court ordering system, backed by PostgreSQL with an in-memory
fallback when the database is unreachable.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
