"""
Weekly progress reports built from the activity ledger.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, timedelta, timezone

from studypal.analysis import schemas
from studypal.analysis.analytics import WEEK_DAYS, round_half_up
from studypal.stores import HistoryItem, HistoryType, PracticeTestEntry, ProgressReportEntry

logger = logging.getLogger(__name__)


def week_window(today: date) -> tuple[date, date]:
    """The seven calendar days ending *today*, inclusive."""
    return today - timedelta(days=WEEK_DAYS - 1), today


def items_in_window(items, start: date, end: date, tz: timezone,
                    student_id: str | None = None) -> list[HistoryItem]:
    selected = []
    for item in items:
        created = item.created_at
        if created is None:
            continue
        day = created.astimezone(tz).date()
        if not (start <= day <= end):
            continue
        if student_id is not None and item.student_id != student_id:
            continue
        selected.append(item)
    return selected


class ReportService:

    @staticmethod
    def build_learning_data(items: list[HistoryItem]) -> str:
        """Summarise a week of ledger entries as plain text for the report prompt.

        Lists topics studied with their practice time, each graded test with
        its percentage, and the other generated material.
        """
        if not items:
            return 'No recorded study activity this week.'

        topic_seconds: dict[str, int] = OrderedDict()
        topic_tests: dict[str, int] = OrderedDict()
        scores = []
        others = []
        total_seconds = 0

        for item in reversed(items):  # oldest first reads naturally
            if isinstance(item, PracticeTestEntry):
                label = item.topic_label()
                topic_seconds[label] = topic_seconds.get(label, 0) + (item.duration or 0)
                topic_tests[label] = topic_tests.get(label, 0) + 1
                total_seconds += item.duration or 0
                if item.percentage is not None:
                    scores.append(f"{item.title} ({round_half_up(item.percentage)}%)")
                elif item.is_assignment:
                    others.append(f"Assigned test, not yet taken: {item.title}")
            elif item.type is not HistoryType.PROGRESS_REPORT:
                others.append(f"{item.type.value}: {item.title}")

        lines = []
        if topic_seconds:
            studied = ', '.join(
                f"{topic} ({round_half_up(secs / 3600, 2)} hours, {topic_tests[topic]} test(s))"
                for topic, secs in topic_seconds.items()
            )
            lines.append(f"- Topics Studied: {studied}")
        if scores:
            lines.append(f"- Practice Test Scores: {', '.join(scores)}")
        lines.append(f"- Time Spent: {round_half_up(total_seconds / 3600, 2)} hours total")
        for other in others:
            lines.append(f"- {other}")
        return '\n'.join(lines)

    @staticmethod
    def generate_weekly_report(workspace, flows, student=None) -> ProgressReportEntry:
        """Generate and record the report for the last seven days.

        Args:
            workspace: The user's Workspace.
            flows: ``StudyFlows`` used for the report prompt.
            student: Optional roster Student; limits the data to their
                entries and tags the report with their id.

        Raises:
            ExternalServiceFailure: the model call failed; nothing is recorded.
        """
        start, end = week_window(workspace.analytics.today())
        student_id = student.id if student else None
        items = items_in_window(workspace.ledger.list(), start, end, workspace.tz, student_id)
        user_id = student_id or workspace.profile.get()['id']

        output = flows.progress_report(schemas.ProgressReportInput(
            user_id=user_id,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            learning_data=ReportService.build_learning_data(items),
        ))

        who = f' for {student.name}' if student else ''
        entry = ProgressReportEntry(
            title=f'Weekly Report{who}: {start.isoformat()} to {end.isoformat()}',
            content=output.report,
            student_id=student_id,
        )
        stored = workspace.ledger.append(entry)
        logger.info(f"Recorded weekly report {stored.id} for {user_id}")
        return stored
