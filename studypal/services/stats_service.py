from __future__ import annotations

from collections import Counter
from datetime import date

from studypal.stores import HistoryType

MOTIVATIONAL_QUOTES = (
    "The secret to getting ahead is getting started.",
    "Believe you can and you're halfway there.",
    "Don't watch the clock; do what it does. Keep going.",
    "The expert in anything was once a beginner.",
    "The beautiful thing about learning is that no one can take it away from you.",
    "Success is not final, failure is not fatal: it is the courage to continue that counts.",
    "The future belongs to those who believe in the beauty of their dreams.",
    "The only way to learn mathematics is to do mathematics.",
    "Strive for progress, not perfection.",
    "Your only limit is your mind.",
)


class StatsService:
    @staticmethod
    def quote_of_the_day(today: date) -> str:
        """Same quote all day, a different one tomorrow."""
        return MOTIVATIONAL_QUOTES[today.toordinal() % len(MOTIVATIONAL_QUOTES)]

    @staticmethod
    def get_dashboard_data(workspace, selected_day: date | None = None) -> dict:
        items = workspace.ledger.list()
        snapshot = workspace.analytics.snapshot()
        today = workspace.analytics.today()
        counts = Counter(item.type for item in items)

        return {
            'stats': {
                'study_plans': counts[HistoryType.STUDY_PLAN],
                'explanations': counts[HistoryType.EXPLANATION],
                'practice_tests': counts[HistoryType.PRACTICE_TEST],
                'reports': counts[HistoryType.PROGRESS_REPORT],
                'overall_performance': snapshot.overall_performance,
                'week_hours': round(sum(snapshot.weekly_hours), 2),
            },
            'weekly': [b.to_dict() for b in snapshot.weekly],
            'recent_items': items[:5],
            'pending_assignments': workspace.ledger.pending_assignments(),
            'selected_day': selected_day,
            'daily_items': StatsService.items_on_day(workspace, selected_day) if selected_day else [],
            'quote': StatsService.quote_of_the_day(today),
        }

    @staticmethod
    def items_on_day(workspace, day: date) -> list:
        """Ledger entries created on *day* in the display timezone."""
        result = []
        for item in workspace.ledger.list():
            created = item.created_at
            if created and created.astimezone(workspace.tz).date() == day:
                result.append(item)
        return result

    @staticmethod
    def get_analytics_data(workspace) -> dict:
        snapshot = workspace.analytics.snapshot()
        chart_topics = workspace.chart_topics()
        mastery = [
            {'topic': topic, 'mastery': snapshot.topic_mastery.get(topic)}
            for topic in chart_topics
        ]
        # Topics with scores but missing from the chart list still get a row.
        known = {t.lower() for t in chart_topics}
        for topic, pct in snapshot.topic_mastery.items():
            if topic.lower() not in known:
                mastery.append({'topic': topic, 'mastery': pct})

        return {
            'overall_performance': snapshot.overall_performance,
            'tests_taken': snapshot.tests_taken,
            'total_study_hours': snapshot.total_study_hours,
            'weekly': [b.to_dict() for b in snapshot.weekly],
            'mastery': mastery,
            'score_distribution': snapshot.score_distribution,
            'managed_topics': workspace.topics.list(),
            'derived_topics': workspace.tracked_topics(),
        }
