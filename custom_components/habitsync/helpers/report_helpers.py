"""Reporting helper functions for HabitSync services.

This module provides read-only data shaping for the leaderboard and export
services. Scores come from StatisticsEngine so the exported "Total Score"
column always equals the live leaderboard for the same window.
Service handlers delegate composition logic here and remain thin.
"""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.statistics_engine import StatisticsEngine
from ..utils.dt_utils import dt_date_key, dt_month_days, dt_week_days

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from ..type_defs import ExportMemberBlock, ExportReport


def resolve_window(window: str, today: date) -> list[date]:
    """Return the days of the Monday-start week or calendar month containing today.

    Raises:
        ValueError: Unknown window name.
    """
    if window == const.WINDOW_WEEK:
        return dt_week_days(today)
    if window == const.WINDOW_MONTH:
        return dt_month_days(today)
    raise ValueError(f"Unknown scoring window: {window}")


def _member_pairs(members: list[Mapping[str, Any]]) -> list[tuple[str, str]]:
    return [
        (member[const.DATA_USER_ID], member.get(const.DATA_USER_NAME, ""))
        for member in members
    ]


def build_export_report(
    members: list[Mapping[str, Any]],
    scoped_habits: list[Mapping[str, Any]],
    window: str,
    today: date,
) -> ExportReport:
    """Build the summary and member x habit x day detail tables.

    Args:
        members: User records of the scope (one user for personal scope)
        scoped_habits: Habits already filtered to the scope
        window: `week` or `month`
        today: Local calendar day the window is resolved from
    """
    window_days = resolve_window(window, today)
    summary = StatisticsEngine.build_leaderboard(
        _member_pairs(members), scoped_habits, window_days
    )

    details: list[ExportMemberBlock] = []
    for member in members:
        member_id = member[const.DATA_USER_ID]
        name = str(member.get(const.DATA_USER_NAME, ""))
        contact = (
            member.get(const.DATA_USER_EMAIL) or member.get(const.DATA_USER_MOBILE) or ""
        )
        rows = []
        for habit in scoped_habits:
            if habit.get(const.DATA_HABIT_USER_ID) != member_id:
                continue
            symbols = StatisticsEngine.day_symbols(habit, window_days)
            rows.append(
                {
                    "member": name,
                    "habit": habit.get(const.DATA_HABIT_TITLE, ""),
                    "frequency": StatisticsEngine.frequency_label(habit),
                    "days": symbols,
                    "total": symbols.count(const.EXPORT_SYMBOL_DONE),
                }
            )
        details.append(
            {
                "user_id": member_id,
                "header": const.EXPORT_MEMBER_HEADER_FMT.format(
                    name=name.upper(), contact=contact
                ),
                "rows": rows,  # type: ignore[typeddict-item]
            }
        )

    return {
        "window": window,
        "start": dt_date_key(window_days[0]),
        "end": dt_date_key(window_days[-1]),
        "day_labels": [
            day.strftime(const.EXPORT_DAY_LABEL_FORMAT) for day in window_days
        ],
        "summary": summary,
        "details": details,
    }


def _detail_header(report: ExportReport) -> list[str]:
    return [
        const.EXPORT_HEADER_MEMBER,
        const.EXPORT_HEADER_HABIT,
        const.EXPORT_HEADER_FREQUENCY,
        *report["day_labels"],
        const.EXPORT_HEADER_TOTAL,
    ]


def render_report_markdown(report: ExportReport) -> str:
    """Render the export as Markdown tables."""
    lines = [
        "# " + const.EXPORT_TITLE_FMT.format(start=report["start"], end=report["end"]),
        "",
        "## Summary",
        "",
        f"| {const.EXPORT_HEADER_MEMBER_NAME} | {const.EXPORT_HEADER_SCORE} "
        f"| {const.EXPORT_HEADER_RANK} |",
        "| --- | --- | --- |",
    ]
    lines.extend(
        f"| {entry['name']} | {entry['score']} | {entry['rank']} |"
        for entry in report["summary"]
    )

    header = _detail_header(report)
    lines.extend(["", "## Detailed Log"])
    for block in report["details"]:
        lines.extend(["", f"### {block['header']}", ""])
        if not block["rows"]:
            lines.append(f"_{const.EXPORT_NO_HABITS}_")
            continue
        lines.append("| " + " | ".join(header) + " |")
        lines.append("|" + " --- |" * len(header))
        for row in block["rows"]:
            cells = [row["member"], row["habit"], row["frequency"], *row["days"]]
            cells.append(str(row["total"]))
            lines.append("| " + " | ".join(cells) + " |")

    return "\n".join(lines)


def render_report_csv(report: ExportReport) -> str:
    """Render the export as CSV: the summary table, a blank line, then details."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(
        [
            const.EXPORT_HEADER_MEMBER_NAME,
            const.EXPORT_HEADER_SCORE,
            const.EXPORT_HEADER_RANK,
        ]
    )
    for entry in report["summary"]:
        writer.writerow([entry["name"], entry["score"], entry["rank"]])

    header = _detail_header(report)
    for block in report["details"]:
        writer.writerow([])
        writer.writerow([block["header"]])
        writer.writerow(header)
        if not block["rows"]:
            writer.writerow([const.EXPORT_NO_HABITS])
            continue
        for row in block["rows"]:
            writer.writerow(
                [row["member"], row["habit"], row["frequency"], *row["days"], row["total"]]
            )

    return buffer.getvalue()
