from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import arg, current_user_id, super_admin_required
from ..common.validators import require_positive_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.marksheet_service

    def _sent_response(message: str, log):
        return jsonify(
            {
                "message": message,
                "emailLogId": log.log_id,
                "sentAt": log.sent_at.isoformat() if log.sent_at else None,
            }
        )

    @app.route("/api/hrm/super/send-marksheet-email", methods=["POST"], endpoint="hrm_send_marksheet")
    @super_admin_required
    def send_marksheet_email():
        log = service.send(
            subject_user_id=arg("subjectUserId"),
            month_key=arg("monthKey"),
            sent_by=current_user_id(),
        )
        return _sent_response("Email sent successfully", log)

    @app.route("/api/hrm/super/resend-email", methods=["POST"], endpoint="hrm_resend_email")
    @super_admin_required
    def resend_email():
        log = service.resend(email_log_id=arg("emailLogId"), sent_by=current_user_id())
        return _sent_response("Email resent successfully", log)

    @app.route("/api/hrm/super/email-logs", methods=["GET"], endpoint="hrm_email_logs")
    @super_admin_required
    def email_logs():
        subject_raw = (request.args.get("subjectUserId") or "").strip()
        subject_id = require_positive_int(subject_raw, "subjectUserId") if subject_raw else None
        logs = service.list_logs(
            subject_user_id=subject_id,
            month_key=(request.args.get("monthKey") or "").strip() or None,
        )
        return jsonify({"logs": [log.to_dict() for log in logs]})
