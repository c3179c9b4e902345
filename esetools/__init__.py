"""Replay APDU scripts against a secure element and relay socket traffic to one."""

__version__ = "0.1.0"