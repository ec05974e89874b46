"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import expenses_bp  # noqa: F401
