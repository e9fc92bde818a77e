"""Shared helpers.

- logging_utils.py: logging setup, structured debug context, timing
- process.py: blocking subprocess runner with bounded output
"""
