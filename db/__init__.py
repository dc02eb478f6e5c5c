"""Booking store client and row normalization."""

from .sheets_client import SheetsClient, get_db_client

__all__ = ["SheetsClient", "get_db_client"]
