"""Operator endpoints, restricted to the ``admin`` role."""

from __future__ import annotations

from flask import Blueprint, request

from sessionauth.api.deps import get_revocation, json_response, timing, translate_service_errors
from sessionauth.api.session import require_session, restrict_to
from sessionauth.schemas import RevokeSessionSchema

bp = Blueprint("admin", __name__, url_prefix="/admin")

revoke_schema = RevokeSessionSchema()


@bp.post("/sessions/<subject_id>/revoke")
@require_session
@restrict_to("admin")
@timing
@translate_service_errors
def revoke_session(subject_id: str):
    """
    Revoke another user's session.

    Without ``credentials`` only the refresh record is dropped; with it every
    credential issued to the subject before now is rejected as well.
    """

    data = revoke_schema.load(request.get_json(silent=True) or {})
    revocation = get_revocation()
    if data["credentials"]:
        at = revocation.on_credential_change(subject_id)
        body = {"subject_id": subject_id, "revoked_before": at.isoformat()}
    else:
        body = {"subject_id": subject_id, "removed": revocation.logout(subject_id)}
    return json_response({"message": "Session revoked", "data": body})
