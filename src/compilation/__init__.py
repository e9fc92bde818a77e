"""Compilation report model and loader.

- models.py: module, chunk and per-artifact result types
- report.py: JSON report loading, schema validation and issuer linking
"""
