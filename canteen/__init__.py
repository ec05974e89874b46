"""
canteen/__init__.py

Flask application factory for the canteen accounting app.

- Server-rendered CRUD pages per entity, scoped to the selected month.
- SQLite for development, any SQLAlchemy URL in production (Flask-Migrate).
- Access control is server-side; the sidebar only hides what a role cannot use.
"""

from __future__ import annotations

import logging

import click
from flask import Flask, g, render_template
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from .extensions import csrf, db, login_manager, migrate
from .models import User
from .months import all_months, load_selected_month
from .utils import register_template_filters


# -------------------------------------------------------------------
# NAVIGATION STRUCTURE (UI visibility only; security enforced in routes)
# -------------------------------------------------------------------
NAV_ITEMS = [
    {"label": "الرئيسية", "endpoint": "dashboard.index", "icon": "📊", "admin_only": False},
    {"label": "الموردين", "endpoint": "suppliers.list_suppliers", "icon": "🏪", "admin_only": False},
    {"label": "الفواتير", "endpoint": "invoices.list_invoices", "icon": "🧾", "admin_only": False},
    {"label": "النقدي", "endpoint": "cash_sales.list_cash_sales", "icon": "💵", "admin_only": False},
    {"label": "البضاعة المرحلة", "endpoint": "carried_goods.list_carried_goods", "icon": "📦", "admin_only": False},
    {"label": "النثريات", "endpoint": "expenses.list_expenses", "icon": "💰", "admin_only": False},
    {"label": "التقفيل", "endpoint": "closing.monthly_closing", "icon": "⚖️", "admin_only": False},
    {"label": "المستخدمين", "endpoint": "users.list_users", "icon": "👥", "admin_only": False},
]


def _configure_logging(app: Flask) -> None:
    """Root logger format/level from config (LOG_LEVEL)."""
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)


def create_app(config_object: str | object = "config.Config") -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    _configure_logging(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message = "برجاء تسجيل الدخول أولاً."
    login_manager.login_message_category = "info"

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        """Load user for Flask-Login."""
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    register_template_filters(app)

    # ----------------------------------------------------------------------
    # Month scope for every page
    # ----------------------------------------------------------------------
    @app.before_request
    def _load_month_scope():
        if current_user.is_authenticated:
            load_selected_month()

    # ----------------------------------------------------------------------
    # Blueprints
    # ----------------------------------------------------------------------
    from .blueprints.auth import auth_bp
    from .blueprints.dashboard import dashboard_bp
    from .blueprints.months import months_bp
    from .blueprints.suppliers import suppliers_bp
    from .blueprints.invoices import invoices_bp
    from .blueprints.cash_sales import cash_sales_bp
    from .blueprints.carried_goods import carried_goods_bp
    from .blueprints.expenses import expenses_bp
    from .blueprints.closing import closing_bp
    from .blueprints.users import users_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(months_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(cash_sales_bp)
    app.register_blueprint(carried_goods_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(closing_bp)
    app.register_blueprint(users_bp)

    # ----------------------------------------------------------------------
    # Context globals (navigation, month selector)
    # ----------------------------------------------------------------------
    @app.context_processor
    def inject_globals():
        """
        Navigation and month list for the layout.

        SECURITY NOTE:
        - This only filters visibility. Routes enforce permissions.
        """
        if not current_user.is_authenticated:
            return {"config": app.config, "nav_items": [], "months": [], "selected_month": None}

        nav_items = [
            item for item in NAV_ITEMS
            if not item["admin_only"] or current_user.is_admin
        ]
        return {
            "config": app.config,
            "nav_items": nav_items,
            "months": all_months(),
            "selected_month": g.get("month"),
        }

    # ----------------------------------------------------------------------
    # Errors
    # ----------------------------------------------------------------------
    @app.errorhandler(403)
    def forbidden(_error):
        return render_template("errors/403.html"), 403

    @app.errorhandler(404)
    def not_found(_error):
        return render_template("errors/404.html"), 404

    # ----------------------------------------------------------------------
    # CLI
    # ----------------------------------------------------------------------
    @app.cli.command("seed-admin")
    @click.argument("email")
    @click.argument("password")
    @click.argument("name")
    def seed_admin_command(email, password, name):
        """Create an admin account."""
        from .seed import create_admin

        try:
            create_admin(email=email, password=password, name=name)
        except ValueError as exc:
            raise click.ClickException(str(exc))
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise click.ClickException(f"Database error: {exc}")
        click.echo(f"Admin {email} created.")

    @app.cli.command("start-month")
    @click.argument("name")
    def start_month_command(name):
        """Start a new current month."""
        from .months import start_new_month

        name = name.strip()
        if not name:
            raise click.ClickException("Month name is required.")
        month = start_new_month(name)
        db.session.commit()
        click.echo(f"Month '{month.name}' is now current.")

    return app
