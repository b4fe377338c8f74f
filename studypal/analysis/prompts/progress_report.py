"""
Prompt template for the weekly progress report.
"""
from __future__ import annotations


def build_progress_report_prompt(
    user_id: str,
    start_date: str,
    end_date: str,
    learning_data: str,
) -> list[dict]:
    """Build prompt messages for a weekly progress report.

    Args:
        user_id: Whose week this is (profile id or roster UID).
        start_date: First day of the week, YYYY-MM-DD.
        end_date: Last day of the week, YYYY-MM-DD.
        learning_data: Plain-text summary of topics, scores and time spent.

    Returns:
        List of message dicts for LLM chat API.
    """
    return [
        {
            "role": "system",
            "content": "You are an AI learning assistant writing progress reports for students, parents and teachers.",
        },
        {
            "role": "user",
            "content": f"""Write a weekly progress report for user {user_id} covering {start_date} to {end_date}.

The report should include:
- A summary of the topics studied during the week.
- An analysis of performance on practice tests.
- The student's strengths and weaknesses.
- Concrete suggestions for what to improve next week.

Keep the tone encouraging, supportive and insightful. Use markdown headers and bullet lists.

## Learning data
{learning_data}

Return only a JSON object:
{{"report": "<the report as markdown text>"}}""",
        },
    ]
