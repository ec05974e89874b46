"""
Authentication Routes

Provides:
- /auth/login
- /auth/logout
- /auth/seed-admin (first system bootstrap: admin + first month)
"""

import logging

from flask import (
    Blueprint,
    render_template,
    redirect,
    url_for,
    flash,
    request,
)
from flask_login import (
    login_user,
    logout_user,
    login_required,
    current_user,
)
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...models import User
from ...seed import create_admin
from ...utils import safe_next_url

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


# ============================================================
# LOGIN
# ============================================================

@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    """Authenticate a user by email and password. Inactive users are refused."""
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))

    if request.method == "POST":
        email = (request.form.get("email") or "").strip().lower()
        password = request.form.get("password") or ""

        user = User.query.filter_by(email=email).first()

        if not user or not user.check_password(password):
            flash("البريد الإلكتروني أو كلمة المرور غير صحيحة.", "danger")
            return render_template("auth/login.html"), 401

        if not user.is_active:
            flash("الحساب غير مفعل.", "danger")
            return render_template("auth/login.html"), 403

        login_user(user)
        logger.info("User %s logged in", user.email)

        return redirect(safe_next_url(request.args.get("next"), "dashboard.index"))

    return render_template("auth/login.html")


# ============================================================
# LOGOUT
# ============================================================

@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    """Log out the current user."""
    logout_user()
    flash("تم تسجيل الخروج.", "info")
    return redirect(url_for("auth.login"))


# ============================================================
# SEED FIRST ADMIN (BOOTSTRAP)
# ============================================================

@auth_bp.route("/seed-admin", methods=["GET", "POST"])
def seed_admin():
    """
    Bootstrap the FIRST admin of the system.

    Blocked as soon as any user exists. Also starts the first month.
    """
    if User.query.count() > 0:
        flash("يوجد مستخدم بالفعل في النظام.", "warning")
        return redirect(url_for("auth.login"))

    if request.method == "POST":
        try:
            create_admin(
                email=request.form.get("email") or "",
                password=request.form.get("password") or "",
                name=request.form.get("name") or "",
            )
        except ValueError:
            flash("برجاء إدخال البريد الإلكتروني وكلمة المرور والاسم.", "danger")
            return render_template("auth/seed_admin.html")
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Admin bootstrap failed")
            flash("حدث خطأ في إنشاء المدير.", "danger")
            return render_template("auth/seed_admin.html")

        flash("تم إنشاء حساب المدير. سجل الدخول.", "success")
        return redirect(url_for("auth.login"))

    return render_template("auth/seed_admin.html")
