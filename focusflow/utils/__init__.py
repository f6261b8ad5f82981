"""Utility modules for FocusFlow."""

from .clock import day_key, new_id, parse_date, parse_timestamp, utc_now

__all__ = ['day_key', 'new_id', 'parse_date', 'parse_timestamp', 'utc_now']
