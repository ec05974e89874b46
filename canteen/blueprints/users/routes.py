"""
User management.

- Any logged-in user can see the user list.
- Admins create users and change roles; the UI is never trusted, roles and
  required fields are validated server-side.

Audit:
- CREATE / UPDATE logged
"""

from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from ...audit import ACTION_CREATE, ACTION_UPDATE, log_action, serialize_model
from ...extensions import db
from ...models import ROLE_ACCOUNTANT, ROLES, User
from ...security import admin_required
from ...utils import form_text

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/users")


# ---------------------------------------------------------------------
# LIST USERS
# ---------------------------------------------------------------------
@users_bp.route("/")
@login_required
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return render_template(
        "users/list.html",
        users=users,
        show_form=bool(request.args.get("new")),
    )


# ---------------------------------------------------------------------
# CREATE USER
# ---------------------------------------------------------------------
@users_bp.route("/new", methods=["POST"])
@login_required
@admin_required
def create_user():
    """
    Required: email, password, name.
    Role defaults to accountant.
    """
    email = (form_text("email") or "").lower()
    password = (request.form.get("password") or "").strip()
    name = form_text("name")
    role = request.form.get("role") or ROLE_ACCOUNTANT

    if not email or not password or not name:
        flash("البريد الإلكتروني وكلمة المرور والاسم مطلوبة.", "danger")
        return redirect(url_for("users.list_users", new=1))

    if role not in ROLES:
        flash("صلاحية غير صحيحة.", "danger")
        return redirect(url_for("users.list_users", new=1))

    if User.query.filter_by(email=email).first():
        flash("البريد الإلكتروني مستخدم بالفعل.", "danger")
        return redirect(url_for("users.list_users", new=1))

    user = User(email=email, name=name, role=role, is_active=True)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.flush()
        log_action(user, ACTION_CREATE, after=serialize_model(user))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Creating user %s failed", email)
        flash("حدث خطأ في إنشاء المستخدم.", "danger")
        return redirect(url_for("users.list_users"))

    logger.info("User %s created with role %s", email, role)
    flash("تم إنشاء المستخدم بنجاح.", "success")
    return redirect(url_for("users.list_users"))


# ---------------------------------------------------------------------
# CHANGE ROLE
# ---------------------------------------------------------------------
@users_bp.route("/<int:user_id>/role", methods=["POST"])
@login_required
@admin_required
def change_role(user_id: int):
    user = User.query.get_or_404(user_id)

    role = request.form.get("role")
    if role not in ROLES:
        flash("صلاحية غير صحيحة.", "danger")
        return redirect(url_for("users.list_users"))

    # Admins cannot change their own role.
    if user.id == current_user.id and role != user.role:
        flash("لا يمكنك تغيير صلاحيتك الخاصة.", "warning")
        return redirect(url_for("users.list_users"))

    before = serialize_model(user)
    try:
        user.role = role
        db.session.flush()
        log_action(user, ACTION_UPDATE, before=before, after=serialize_model(user))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Changing role of user %s failed", user_id)
        flash("حدث خطأ في تحديث الصلاحية.", "danger")
        return redirect(url_for("users.list_users"))

    logger.info("User %s role changed to %s", user.email, role)
    flash("تم تحديث الصلاحية بنجاح.", "success")
    return redirect(url_for("users.list_users"))
