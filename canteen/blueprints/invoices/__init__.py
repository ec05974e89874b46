"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import invoices_bp  # noqa: F401
