from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from src.hrm_system.hrm_system.common import datetime_utils as dt
from src.hrm_system.hrm_system.container import assemble_container
from src.hrm_system.hrm_system.core.enums import HrmRole, PeriodStatus
from src.hrm_system.hrm_system.core.exceptions import DeliveryError, MonthLockedError, NotFoundError
from src.hrm_system.hrm_system.funds.model import FundEntry
from src.hrm_system.hrm_system.kpi.model import (
    Assignment,
    CriteriaItem,
    KpiSubmission,
    SubmissionItem,
    Week,
    WeeklyScore,
)
from src.hrm_system.hrm_system.notifications.model import CompanyInfo, EmailLog
from src.hrm_system.hrm_system.payroll.model import Month
from src.hrm_system.hrm_system.users.model import HrmUser

FIXED_NOW = datetime(2026, 3, 2, 10, 0, tzinfo=ZoneInfo("Asia/Dhaka"))

SUPER_ID = 1
ADMIN_ID = 2
ALICE_ID = 10
BOB_ID = 11


class InMemoryUsers:
    def __init__(self, users: list[HrmUser]):
        self.users = {u.user_id: u for u in users}

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_many(self, user_ids):
        return {int(i): self.users[int(i)] for i in user_ids if int(i) in self.users}


class InMemoryKpi:
    def __init__(self):
        self.weeks: dict[str, Week] = {}
        self.assignments: list[Assignment] = []
        self.criteria: dict[int, list[CriteriaItem]] = {}
        self.submissions: dict[tuple[str, int, int], KpiSubmission] = {}
        self.weekly: dict[tuple[str, int], WeeklyScore] = {}
        self.compliance: dict[tuple[str, int], object] = {}
        self._next_id = 1

    # -------- seeding helpers --------
    def add_week(self, week_key: str, status: PeriodStatus = PeriodStatus.OPEN) -> Week:
        week = Week(week_id=len(self.weeks) + 1, week_key=week_key, friday_date=dt.parse_week_key(week_key), status=status)
        self.weeks[week_key] = week
        return week

    def assign(self, marker_id: int, subject_id: int, *, is_active: bool = True) -> None:
        self.assignments.append(Assignment(marker_admin_id=marker_id, subject_user_id=subject_id, is_active=is_active))

    def set_weekly(self, subject_id: int, week_key: str, score: Optional[float], *, is_complete: bool = True) -> None:
        if week_key not in self.weeks:
            self.add_week(week_key)
        self.weekly[(week_key, subject_id)] = WeeklyScore(
            subject_user_id=subject_id,
            week_key=week_key,
            average_score=score,
            expected_markers_count=1,
            submitted_markers_count=0 if score is None else 1,
            is_complete=is_complete,
        )

    # -------- weeks --------
    def get_week(self, week_key):
        return self.weeks.get(week_key)

    def ensure_week(self, *, week_key, friday_date):
        return self.weeks.get(week_key) or self.add_week(week_key)

    def set_week_status(self, *, week_key, status):
        week = self.weeks.get(week_key)
        if not week:
            return None
        self.weeks[week_key] = replace(week, status=status)
        return self.weeks[week_key]

    def list_weeks(self, week_keys):
        return sorted((self.weeks[k] for k in week_keys if k in self.weeks), key=lambda w: w.friday_date)

    # -------- assignments / criteria --------
    def get_active_assignment(self, *, marker_admin_id, subject_user_id):
        for a in self.assignments:
            if a.is_active and a.marker_admin_id == marker_admin_id and a.subject_user_id == subject_user_id:
                return a
        return None

    def list_active_assignments(self):
        return [a for a in self.assignments if a.is_active]

    def get_active_criteria(self, subject_user_id):
        return list(self.criteria.get(int(subject_user_id), []))

    # -------- submissions --------
    def save_submission(self, *, week_key, marker_admin_id, subject_user_id, total_score, comment, scores, submitted_at):
        key = (week_key, int(marker_admin_id), int(subject_user_id))
        existing = self.submissions.get(key)
        submission_id = existing.submission_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        names = {c.criteria_id: c.name for c in self.criteria.get(int(subject_user_id), [])}
        self.submissions[key] = KpiSubmission(
            submission_id=submission_id,
            week_key=week_key,
            marker_admin_id=int(marker_admin_id),
            subject_user_id=int(subject_user_id),
            total_score=total_score,
            comment=comment,
            submitted_at=submitted_at,
            items=tuple(
                SubmissionItem(criteria_id=s.criteria_id, criteria_name=names.get(s.criteria_id, "?"), score_raw=s.score_raw)
                for s in scores
            ),
        )
        return submission_id

    def list_submissions(self, *, week_keys, subject_user_id=None):
        keys = set(week_keys)
        out = [
            s
            for s in self.submissions.values()
            if s.week_key in keys and (subject_user_id is None or s.subject_user_id == subject_user_id)
        ]
        return sorted(out, key=lambda s: (s.week_key, s.submission_id))

    # -------- weekly results --------
    def save_weekly_results(self, results):
        for r in results:
            self.weekly[(r.week_key, r.subject_user_id)] = r

    def save_compliance(self, records):
        for c in records:
            self.compliance[(c.week_key, c.admin_user_id)] = c

    def list_weekly_scores(self, *, week_keys, subject_user_id=None):
        keys = set(week_keys)
        out = [
            w
            for (wk, sid), w in self.weekly.items()
            if wk in keys and (subject_user_id is None or sid == subject_user_id)
        ]
        return sorted(out, key=lambda w: (w.week_key, w.subject_user_id))


class InMemoryPayroll:
    def __init__(self):
        self.months: dict[str, Month] = {}
        self.results: dict[tuple[int, str], object] = {}
        self._next_id = 1

    def get_month(self, month_key):
        return self.months.get(month_key)

    def ensure_month(self, *, month_key, start_date, end_date):
        if month_key not in self.months:
            self.months[month_key] = Month(
                month_id=len(self.months) + 1, month_key=month_key, start_date=start_date, end_date=end_date
            )
        return self.months[month_key]

    def set_month_status(self, *, month_key, status):
        month = self.months.get(month_key)
        if not month:
            return None
        self.months[month_key] = replace(month, status=status)
        for key, r in list(self.results.items()):
            if r.month_key == month_key:
                self.results[key] = replace(r, status=status)
        return self.months[month_key]

    def get_result(self, *, subject_user_id, month_key):
        return self.results.get((int(subject_user_id), month_key))

    def get_result_by_id(self, result_id):
        for r in self.results.values():
            if r.result_id == int(result_id):
                return r
        return None

    def save_result(self, result):
        key = (result.subject_user_id, result.month_key)
        month = self.months.get(result.month_key)
        if not month:
            raise NotFoundError(f"Month {result.month_key} not found")
        if month.is_locked:
            raise MonthLockedError(result.month_key)
        existing = self.results.get(key)
        result_id = existing.result_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self.results[key] = replace(result, result_id=result_id, status=month.status)
        return self.results[key]

    def list_results(self, month_key):
        rows = [r for r in self.results.values() if r.month_key == month_key]
        return sorted(
            rows,
            key=lambda r: (r.monthly_score is None, -(r.monthly_score or 0), r.subject_user_id),
        )

    def list_subject_results(self, subject_user_id):
        rows = [r for r in self.results.values() if r.subject_user_id == int(subject_user_id)]
        return sorted(rows, key=lambda r: r.month_key, reverse=True)


class InMemoryFunds:
    def __init__(self, payroll: InMemoryPayroll):
        self._payroll = payroll
        self.entries: dict[int, FundEntry] = {}
        self._next_id = 1

    def get_entry(self, entry_id):
        return self.entries.get(int(entry_id))

    def upsert_entry(
        self, *, monthly_result_id, entry_type, status, expected_amount, actual_amount, note, marked_by_id, marked_at
    ):
        result = self._payroll.get_result_by_id(monthly_result_id)
        existing = next(
            (e for e in self.entries.values() if e.monthly_result_id == monthly_result_id and e.entry_type == entry_type),
            None,
        )
        entry_id = existing.entry_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self.entries[entry_id] = FundEntry(
            entry_id=entry_id,
            monthly_result_id=monthly_result_id,
            month_key=result.month_key,
            subject_user_id=result.subject_user_id,
            entry_type=entry_type,
            status=status,
            expected_amount=expected_amount,
            actual_amount=actual_amount,
            note=note,
            marked_by_id=marked_by_id,
            marked_at=marked_at,
        )
        return self.entries[entry_id]

    def update_entry(self, *, entry_id, status, actual_amount, note, marked_by_id, marked_at):
        entry = self.entries.get(int(entry_id))
        if not entry:
            return None
        self.entries[entry.entry_id] = replace(
            entry, status=status, actual_amount=actual_amount, note=note, marked_by_id=marked_by_id, marked_at=marked_at
        )
        return self.entries[entry.entry_id]

    def list_entries(self, *, month_key=None, status=None, entry_type=None, subject_user_id=None):
        out = [
            e
            for e in self.entries.values()
            if (month_key is None or e.month_key == month_key)
            and (status is None or e.status == status)
            and (entry_type is None or e.entry_type == entry_type)
            and (subject_user_id is None or e.subject_user_id == subject_user_id)
        ]
        return sorted(out, key=lambda e: e.entry_id, reverse=True)

    def list_for_results(self, result_ids):
        ids = set(result_ids)
        return [e for e in self.entries.values() if e.monthly_result_id in ids]


class InMemoryEmailLogs:
    def __init__(self):
        self.logs: dict[int, EmailLog] = {}

    def add_log(self, **fields):
        log_id = len(self.logs) + 1
        self.logs[log_id] = EmailLog(log_id=log_id, sent_at=FIXED_NOW.replace(tzinfo=None), **fields)
        return self.logs[log_id]

    def get_log(self, log_id):
        return self.logs.get(int(log_id))

    def list_logs(self, *, subject_user_id=None, month_key=None):
        return [
            log
            for log in sorted(self.logs.values(), key=lambda x: x.log_id, reverse=True)
            if (subject_user_id is None or log.subject_user_id == subject_user_id)
            and (month_key is None or log.month_key == month_key)
        ]


class FakeMailer:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail_with: Optional[str] = None

    def send(self, *, to, subject, text, html):
        if self.fail_with:
            raise DeliveryError(self.fail_with)
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


def make_users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            HrmUser(user_id=SUPER_ID, full_name="Sara Super", email="super@hrm.local", hrm_role=HrmRole.SUPER_ADMIN),
            HrmUser(user_id=ADMIN_ID, full_name="Adam Admin", email="admin@hrm.local", hrm_role=HrmRole.ADMIN),
            HrmUser(user_id=ALICE_ID, full_name="Alice Rahman", email="alice@hrm.local", hrm_role=HrmRole.EMPLOYEE),
            HrmUser(user_id=BOB_ID, full_name="Bob Karim", email="bob@hrm.local", hrm_role=HrmRole.EMPLOYEE),
        ]
    )


def default_criteria() -> list[CriteriaItem]:
    return [
        CriteriaItem(criteria_id=1, name="Punctuality", scale_max=10, weight_percent=30),
        CriteriaItem(criteria_id=2, name="Quality of Work", scale_max=10, weight_percent=40),
        CriteriaItem(criteria_id=3, name="Teamwork", scale_max=10, weight_percent=30),
    ]


@pytest.fixture
def users():
    return make_users()


@pytest.fixture
def kpi_repo():
    return InMemoryKpi()


@pytest.fixture
def payroll_repo():
    return InMemoryPayroll()


@pytest.fixture
def fund_repo(payroll_repo):
    return InMemoryFunds(payroll_repo)


@pytest.fixture
def email_logs():
    return InMemoryEmailLogs()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def container(users, kpi_repo, payroll_repo, fund_repo, email_logs, mailer):
    return assemble_container(
        users_repo=users,
        kpi_repo=kpi_repo,
        payroll_repo=payroll_repo,
        fund_repo=fund_repo,
        email_log_repo=email_logs,
        mailer=mailer,
        company=CompanyInfo(name="WeTrain HRM", support_contact="hr@wetrain.local", currency_symbol="BDT "),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
