"""
Prompt template for the personalized study plan.
"""
from __future__ import annotations

PACE_HINTS = {
    'slow': 'short daily sessions with frequent review days',
    'moderate': 'steady daily sessions with a review day each week',
    'fast': 'dense sessions that cover new material almost every day',
}


def build_study_plan_prompt(goals: str, deadline: str, learning_pace: str) -> list[dict]:
    """Build prompt messages for a personalized study plan.

    Args:
        goals: What the student wants to achieve, in their own words.
        deadline: When they want to achieve it (free text, e.g. "in 4 weeks").
        learning_pace: 'slow', 'moderate' or 'fast'.

    Returns:
        List of message dicts for LLM chat API.
    """
    pace_hint = PACE_HINTS.get(learning_pace, PACE_HINTS['moderate'])
    return [
        {
            "role": "system",
            "content": "You are StudyPal, an AI study planner for school and university students.",
        },
        {
            "role": "user",
            "content": f"""Generate a personalized study plan from the student's goals, deadline and learning pace.

## Student input
Goals: {goals}
Deadline: {deadline}
Learning pace: {learning_pace} ({pace_hint})

## Requirements
- Split the time until the deadline into weeks, then days.
- Name concrete topics and activities for each block.
- Include checkpoints where the student tests themselves.
- Format the plan with markdown: **bold headers** for weeks and `*` bullets for tasks.

## Output
Return only a JSON object:
{{"studyPlan": "<the full plan as markdown text>"}}""",
        },
    ]
