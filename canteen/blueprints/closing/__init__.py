"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import closing_bp  # noqa: F401
