"""Marksheet formatting: subject line, plain-text body and HTML body."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..common import datetime_utils as dt
from ..core.enums import Tier
from .model import CompanyInfo, Marksheet, RenderedEmail

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
MARKSHEET_TEMPLATE = "marksheet.html"
RULE = "-" * 50

TIER_COLORS = {
    Tier.BONUS: "#22c55e",
    Tier.APPRECIATION: "#3b82f6",
    Tier.IMPROVEMENT: "#f59e0b",
    Tier.FINE: "#ef4444",
}

TIER_LABELS = {
    Tier.BONUS: "Bonus",
    Tier.APPRECIATION: "Appreciation",
    Tier.IMPROVEMENT: "Improvement",
    Tier.FINE: "Fine",
    Tier.NO_DATA: "No data",
}


def subject_line(month_key: str, tier: Tier) -> str:
    return f"Your {dt.format_month_display(month_key)} Performance Marksheet - {tier.value}"


def _score(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.2f}"


def _money(value: Optional[float], currency: str) -> str:
    return f"{currency}{float(value or 0):g}"


def _week_ending(week) -> str:
    return week.friday_date.strftime("%b %d, %Y").replace(" 0", " ")


def reward_line(marksheet: Marksheet, company: CompanyInfo) -> str:
    r = marksheet.result
    cur = company.currency_symbol
    if r.tier == Tier.BONUS:
        return f"Congratulations! You earned a bonus of {_money(r.gift_amount, cur)}"
    if r.tier == Tier.APPRECIATION:
        return f"You received an appreciation with a gift of {_money(r.gift_amount, cur)}"
    if r.tier == Tier.FINE:
        return f"Fine Applied: {_money(r.final_fine, cur)}"
    if r.tier == Tier.IMPROVEMENT:
        return f"Keep improving! Base Fine: {_money(r.base_fine, cur)}"
    return "No KPI marks were recorded for this month."


def build_marksheet_text(marksheet: Marksheet, company: CompanyInfo) -> str:
    r = marksheet.result
    cur = company.currency_symbol
    lines = [
        f"{company.name.upper()} - PERFORMANCE MARKSHEET",
        "=" * 50,
        "",
        f"Subject: {marksheet.subject_name}",
        f"Month: {dt.format_month_display(marksheet.month_key)}",
        "",
        "SUMMARY",
        RULE,
        f"Monthly Score: {_score(r.monthly_score)}",
        f"Tier: {r.tier.value}",
        f"Completeness: {r.weeks_count_used}/{r.expected_weeks_count}",
        "",
        "REWARD/FINE INFORMATION",
        RULE,
    ]
    if r.tier == Tier.BONUS:
        lines.append(f"Bonus: {_money(r.gift_amount, cur)}")
    elif r.tier == Tier.APPRECIATION:
        lines.append(f"Appreciation Gift: {_money(r.gift_amount, cur)}")
    elif r.tier == Tier.FINE:
        lines.append(f"Fine: {_money(r.final_fine, cur)}")
    lines.append(f"Base Fine: {_money(r.base_fine, cur)}")
    lines.append(f"Action Type: {r.action_type.value}")
    lines += ["", "WEEKLY DETAILS", RULE, ""]

    for week in marksheet.weeks:
        lines.append(f"Week Ending: {_week_ending(week)} ({week.week_key})")
        lines.append(f"Weekly Score: {_score(week.weekly_score)}")
        lines.append(f"Status: {'Complete' if week.is_complete else 'Incomplete'}")
        lines.append("Submissions:")
        for idx, sub in enumerate(week.submissions, start=1):
            lines.append(f"  - Submission {idx}: {sub.total_score:.2f}")
            for item in sub.items:
                lines.append(f"    * {item.criteria_name}: {item.score_raw:.2f}")
        lines.append("")

    lines += [RULE, f"For any questions, contact {company.support_contact}.", company.name]
    return "\n".join(lines) + "\n"


def _environment(template_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["score"] = _score
    env.filters["week_ending"] = _week_ending
    return env


def render_marksheet_html(
    marksheet: Marksheet,
    company: CompanyInfo,
    *,
    template_dir: Optional[Path] = None,
) -> str:
    template = _environment(template_dir or TEMPLATE_DIR).get_template(MARKSHEET_TEMPLATE)
    r = marksheet.result
    return template.render(
        company=company,
        marksheet=marksheet,
        result=r,
        month_display=dt.format_month_display(marksheet.month_key),
        tier_color=TIER_COLORS.get(r.tier, "#666666"),
        tier_label=TIER_LABELS.get(r.tier, r.tier.value),
        reward_line=reward_line(marksheet, company),
    )


def render_marksheet(marksheet: Marksheet, company: CompanyInfo, *, template_dir: Optional[Path] = None) -> RenderedEmail:
    return RenderedEmail(
        subject_line=subject_line(marksheet.month_key, marksheet.result.tier),
        text_content=build_marksheet_text(marksheet, company),
        html_content=render_marksheet_html(marksheet, company, template_dir=template_dir),
    )
