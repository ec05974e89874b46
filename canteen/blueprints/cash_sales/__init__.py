"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import cash_sales_bp  # noqa: F401
