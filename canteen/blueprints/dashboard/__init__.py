"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import dashboard_bp  # noqa: F401
