"""
canteen/audit.py

Audit trail for bookkeeping mutations.

Each CREATE / UPDATE / DELETE records who changed which row, with column
snapshots before and after. The email is stored as a snapshot so the entry
stays readable after the user row changes.

The helper only ADDS the AuditLog row to the current session; the calling
view owns the transaction (flush -> log_action -> commit).
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from flask import has_request_context, request
from flask_login import current_user

from .extensions import db
from .models import AuditLog

ACTION_CREATE = "CREATE"
ACTION_UPDATE = "UPDATE"
ACTION_DELETE = "DELETE"


def serialize_model(instance: Any) -> Dict[str, Optional[str]]:
    """
    Column snapshot of a model instance (scalar columns only, as strings).
    """
    data: Dict[str, Optional[str]] = {}
    for column in instance.__table__.columns:
        value = getattr(instance, column.name)
        data[column.name] = None if value is None else str(value)
    return data


def log_action(
    entity: Any,
    action: str,
    *,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Add an AuditLog entry for `entity` to the current db session.

    The entity must already have an id (flush before calling).
    """
    entity_id = getattr(entity, "id", None)
    if entity_id is None:
        raise ValueError("log_action entity must have an 'id' attribute (after flush).")

    authenticated = has_request_context() and current_user.is_authenticated

    entry = AuditLog(
        user_id=current_user.id if authenticated else None,
        email_snapshot=current_user.email if authenticated else None,
        entity_type=entity.__class__.__name__,
        entity_id=int(entity_id),
        action=action,
        before_data=json.dumps(before, ensure_ascii=False) if before else None,
        after_data=json.dumps(after, ensure_ascii=False) if after else None,
        ip_address=request.remote_addr if has_request_context() else None,
    )
    db.session.add(entry)
    return entry
