from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .funds.mysql_fund_repository import MySQLFundRepository
from .funds.repository import FundRepository
from .funds.service import FundService
from .kpi.mysql_kpi_repository import MySQLKpiRepository
from .kpi.repository import KpiRepository
from .kpi.service import KpiService
from .notifications.mailer import Mailer, SmtpMailer, SmtpSettings
from .notifications.model import CompanyInfo
from .notifications.mysql_email_log_repository import MySQLEmailLogRepository
from .notifications.repository import EmailLogRepository
from .notifications.service import MarksheetService
from .payroll.calculator.standard_calculator import StandardMonthlyCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.policy import TierPolicy
from .payroll.repository import PayrollRepository
from .payroll.service import MonthlyPerformanceService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    tz_name: str

    users_repo: UserRepository
    kpi_repo: KpiRepository
    payroll_repo: PayrollRepository
    fund_repo: FundRepository
    email_log_repo: EmailLogRepository

    kpi_service: KpiService
    monthly_service: MonthlyPerformanceService
    fund_service: FundService
    marksheet_service: MarksheetService


def assemble_container(
    *,
    users_repo: UserRepository,
    kpi_repo: KpiRepository,
    payroll_repo: PayrollRepository,
    fund_repo: FundRepository,
    email_log_repo: EmailLogRepository,
    mailer: Mailer,
    conn: Optional[DatabaseConnection] = None,
    tz_name: str = DEFAULT_TIMEZONE,
    tier_policy: Optional[TierPolicy] = None,
    company: Optional[CompanyInfo] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL in production, fakes in tests)."""
    kpi_service = KpiService(kpi_repo, tz_name=tz_name, clock=clock)
    monthly_service = MonthlyPerformanceService(
        payroll_repo,
        kpi_repo,
        users_repo,
        fund_repo,
        kpi_service=kpi_service,
        calculator=StandardMonthlyCalculator(tier_policy),
        tz_name=tz_name,
        clock=clock,
    )
    fund_service = FundService(fund_repo, payroll_repo, users_repo, tz_name=tz_name, clock=clock)
    marksheet_service = MarksheetService(
        payroll_repo,
        users_repo,
        email_log_repo,
        mailer,
        kpi_service=kpi_service,
        company=company or CompanyInfo(),
    )

    return Container(
        conn=conn,
        tz_name=tz_name,
        users_repo=users_repo,
        kpi_repo=kpi_repo,
        payroll_repo=payroll_repo,
        fund_repo=fund_repo,
        email_log_repo=email_log_repo,
        kpi_service=kpi_service,
        monthly_service=monthly_service,
        fund_service=fund_service,
        marksheet_service=marksheet_service,
    )


def build_container(
    *,
    db_config: dict,
    tz_name: str = DEFAULT_TIMEZONE,
    tier_policy: Optional[Mapping[str, Any]] = None,
    smtp_config: Optional[Mapping[str, Any]] = None,
    company_info: Optional[Mapping[str, Any]] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        conn=conn,
        tz_name=tz_name,
        users_repo=MySQLUserRepository(conn),
        kpi_repo=MySQLKpiRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        fund_repo=MySQLFundRepository(conn),
        email_log_repo=MySQLEmailLogRepository(conn),
        mailer=SmtpMailer(SmtpSettings.from_dict(smtp_config or {})),
        tier_policy=TierPolicy.from_dict(tier_policy),
        company=CompanyInfo.from_dict(company_info),
    )
