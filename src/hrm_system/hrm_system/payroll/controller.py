from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common import datetime_utils as dt
from ..common.http import arg, current_user_id, login_required, super_admin_required
from ..container import Container
from ..core.constants import DEFAULT_MONTH_OPTIONS
from .service import REPORT_CSV_FIELDS


def register(app: Flask, container: Container) -> None:
    service = container.monthly_service

    @app.route("/api/hrm/system/compute-month", methods=["POST"], endpoint="hrm_compute_month")
    @super_admin_required
    def compute_month():
        """Recompute weekly results and every subject's monthly result.

        Returns 409 when the month is LOCKED; per-subject failures are listed
        in ``failures`` without failing the request.
        """
        computation = service.compute_month(arg("monthKey"))
        return jsonify(
            {
                "message": "Month computed",
                "monthKey": computation.month_key,
                "expectedWeeksCount": computation.expected_weeks_count,
                "weeksInMonth": computation.weeks_in_month,
                "computed": len(computation.results),
                "results": [r.to_dict() for r in computation.results],
                "failures": {str(k): v for k, v in computation.failures.items()},
            }
        )

    @app.route("/api/hrm/system/compute-subject", methods=["POST"], endpoint="hrm_compute_subject")
    @super_admin_required
    def compute_subject():
        result = service.compute_subject(subject_user_id=arg("subjectUserId"), month_key=arg("monthKey"))
        return jsonify({"message": "Subject computed", "result": result.to_dict()})

    @app.route("/api/hrm/system/lock-month", methods=["POST"], endpoint="hrm_lock_month")
    @super_admin_required
    def lock_month():
        month = service.lock_month(arg("monthKey"))
        return jsonify({"message": "Month locked", "monthKey": month.month_key, "status": month.status.value})

    @app.route("/api/hrm/system/unlock-month", methods=["POST"], endpoint="hrm_unlock_month")
    @super_admin_required
    def unlock_month():
        month = service.unlock_month(arg("monthKey"))
        return jsonify({"message": "Month unlocked", "monthKey": month.month_key, "status": month.status.value})

    @app.route("/api/hrm/super/monthly-report", methods=["GET"], endpoint="hrm_monthly_report")
    @super_admin_required
    def monthly_report():
        report = service.monthly_report(arg("monthKey"))
        return jsonify(
            {
                "monthKey": report.month_key,
                "monthDisplay": dt.format_month_display(report.month_key),
                "status": report.status.value,
                "rows": report.rows,
                "summary": report.summary,
            }
        )

    @app.route("/api/hrm/super/monthly-report.csv", methods=["GET"], endpoint="hrm_monthly_report_csv")
    @super_admin_required
    def monthly_report_csv():
        report = service.monthly_report(arg("monthKey"))

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in report.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=monthly_report_{report.month_key}.csv"},
        )

    @app.route("/api/hrm/employee/monthly", methods=["GET"], endpoint="hrm_employee_monthly")
    @login_required
    def employee_monthly():
        """Caller's own monthly results; with ``monthKey`` also the weekly breakdown."""
        user_id = current_user_id()
        month_key = (request.args.get("monthKey") or "").strip()
        payload = {
            "results": [r.to_dict() for r in service.list_subject_results(user_id)],
            "monthOptions": dt.month_options(now=dt.today_local(container.tz_name), count=DEFAULT_MONTH_OPTIONS),
        }
        if month_key:
            result = service.get_result(subject_user_id=user_id, month_key=month_key)
            weeks = container.kpi_service.weekly_details(subject_user_id=user_id, month_key=month_key)
            payload["monthKey"] = month_key
            payload["result"] = result.to_dict()
            payload["weeks"] = [w.to_dict() for w in weeks]
        return jsonify(payload)
