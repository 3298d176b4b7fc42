"""Authoritative server for two-seat Battleships matches."""

__version__ = "0.1.0"
