from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import (
    arg,
    current_role,
    current_user_id,
    json_body,
    login_required,
    roles_required,
    super_admin_required,
)
from ..container import Container
from ..core.enums import HrmRole


def _score_items(raw_items) -> list[dict]:
    """Accept camelCase (``criteriaId``/``scoreRaw``) or snake_case item keys."""
    out = []
    for item in raw_items or []:
        if not isinstance(item, dict):
            out.append(item)
            continue
        out.append(
            {
                "criteria_id": item.get("criteriaId", item.get("criteria_id")),
                "score_raw": item.get("scoreRaw", item.get("score_raw")),
            }
        )
    return out


def register(app: Flask, container: Container) -> None:
    service = container.kpi_service

    @app.route("/api/hrm/admin/submit", methods=["POST"], endpoint="hrm_submit_marks")
    @roles_required(HrmRole.ADMIN, HrmRole.SUPER_ADMIN)
    def submit_marks():
        data = json_body()
        receipt = service.submit_marks(
            marker_id=current_user_id(),
            marker_role=current_role(),
            week_key=str(data.get("weekKey") or ""),
            subject_user_id=data.get("subjectUserId"),
            items=_score_items(data.get("items")),
            comment=data.get("comment"),
        )
        return jsonify(
            {
                "message": "Marks submitted",
                "submissionId": receipt.submission_id,
                "totalScore": receipt.total_score,
                "submittedAt": receipt.submitted_at.isoformat(),
            }
        )

    @app.route("/api/hrm/system/compute-week", methods=["POST"], endpoint="hrm_compute_week")
    @super_admin_required
    def compute_week():
        aggregate = service.compute_week(arg("weekKey"))
        return jsonify(
            {
                "message": "Week computed",
                "weekKey": aggregate.week_key,
                "results": [r.to_dict() for r in aggregate.results],
                "compliance": [c.to_dict() for c in aggregate.compliance],
            }
        )

    @app.route("/api/hrm/super/weeks/<week_key>/lock", methods=["POST"], endpoint="hrm_lock_week")
    @super_admin_required
    def lock_week(week_key: str):
        week = service.lock_week(week_key)
        return jsonify({"message": "Week locked", **week.to_dict()})

    @app.route("/api/hrm/super/weeks/<week_key>/unlock", methods=["POST"], endpoint="hrm_unlock_week")
    @super_admin_required
    def unlock_week(week_key: str):
        week = service.unlock_week(week_key)
        return jsonify({"message": "Week unlocked", **week.to_dict()})

    @app.route("/api/hrm/cron/ensure-week", methods=["POST"], endpoint="hrm_ensure_week")
    @super_admin_required
    def ensure_week():
        week = service.ensure_week((request.args.get("weekKey") or "").strip() or None)
        return jsonify({"message": "Week ready", **week.to_dict()})

    @app.route("/api/hrm/employee/weekly", methods=["GET"], endpoint="hrm_employee_weekly")
    @login_required
    def employee_weekly():
        month_key = arg("monthKey")
        weeks = service.weekly_details(subject_user_id=current_user_id(), month_key=month_key)
        return jsonify({"monthKey": month_key, "weeks": [w.to_dict() for w in weeks]})
