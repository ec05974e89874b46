"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import users_bp  # noqa: F401
