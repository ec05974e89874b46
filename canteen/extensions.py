"""
Central place for Flask extensions.

Instances are created here without an app and bound in create_app()
(canteen/__init__.py), which keeps blueprints and models free of circular imports.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf import CSRFProtect

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
