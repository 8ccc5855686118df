"""
Test Suite

Tests for the Helpdesk Ticketing backend.

Structure:
    tests/
    ├── conftest.py                  # Pytest fixtures (mongomock store, app, users)
    ├── test_authorization.py        # Role hierarchy and route guards
    ├── test_credential_service.py   # Registration, login, expiry, tokens
    ├── test_user_service.py         # Account management
    ├── test_ticket_lifecycle.py     # Ticket state machine
    ├── test_audit_writer.py         # Best-effort audit entries
    ├── test_dashboard_service.py    # Dashboard counts and snapshots
    ├── test_retention_sweep.py      # Archive-then-delete job
    └── test_api.py                  # HTTP endpoints

To run tests:
    pytest
    pytest backend/tests/test_api.py
"""
