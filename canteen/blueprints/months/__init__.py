"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import months_bp  # noqa: F401
