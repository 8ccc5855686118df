"""
Backend Scripts Module

Maintenance scripts that run outside the API process.

Available scripts:
    - init_db.py: Creates indexes and the initial system owner
    - archive_data.py: Runs one retention sweep

Usage:
    python -m scripts.init_db
    python -m scripts.archive_data
"""
