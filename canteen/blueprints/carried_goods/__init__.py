"""
Blueprint package export. Routes live in routes.py.
"""

from .routes import carried_goods_bp  # noqa: F401
