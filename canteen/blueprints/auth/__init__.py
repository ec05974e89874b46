"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import auth_bp  # noqa: F401
