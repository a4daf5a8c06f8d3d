from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user_id, json_body, login_required, super_admin_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.fund_service

    @app.route("/api/hrm/super/funds", methods=["GET"], endpoint="hrm_list_funds")
    @super_admin_required
    def list_funds():
        data = service.list_entries(
            month_key=(request.args.get("monthKey") or "").strip() or None,
            status=request.args.get("status"),
            entry_type=request.args.get("entryType"),
            search=request.args.get("search"),
        )
        return jsonify(data)

    @app.route("/api/hrm/super/funds", methods=["POST"], endpoint="hrm_record_fund")
    @super_admin_required
    def record_fund():
        data = json_body()
        entry = service.record_entry(
            monthly_result_id=data.get("monthlyResultId"),
            entry_type=data.get("entryType"),
            status=data.get("status"),
            actual_amount=data.get("actualAmount"),
            note=data.get("note"),
            marked_by_id=current_user_id(),
        )
        return jsonify({"message": "Fund log saved", "entry": entry.to_dict()})

    @app.route("/api/hrm/super/funds/<int:entry_id>", methods=["PATCH"], endpoint="hrm_update_fund")
    @super_admin_required
    def update_fund(entry_id: int):
        data = json_body()
        entry = service.update_entry(
            entry_id=entry_id,
            status=data.get("status"),
            actual_amount=data.get("actualAmount"),
            note=data.get("note"),
            marked_by_id=current_user_id(),
        )
        return jsonify({"message": "Fund log updated", "entry": entry.to_dict()})

    @app.route("/api/hrm/employee/fund-stats", methods=["GET"], endpoint="hrm_fund_stats")
    @login_required
    def fund_stats():
        return jsonify(service.subject_stats(current_user_id()))
