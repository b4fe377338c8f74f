"""
Prompt template for intelligent explanations.
"""
from __future__ import annotations

LEVEL_HINTS = {
    'Simple': 'Use everyday words, no jargon, as if for a curious 12-year-old.',
    'Detailed': 'Cover the key ideas, the vocabulary and one worked example.',
    'Expert': 'Go deep: formal definitions, edge cases and links to related fields.',
}


def build_explanation_prompt(topic: str, level: str) -> list[dict]:
    """Build prompt messages for explaining *topic* at *level* detail."""
    return [
        {
            "role": "system",
            "content": "You are an expert educator skilled at explaining complex topics in simple terms.",
        },
        {
            "role": "user",
            "content": f"""Explain the topic below at the requested level of detail.

Topic: {topic}
Level: {level}. {LEVEL_HINTS.get(level, '')}

Produce:
1. summary: one concise sentence.
2. detailedExplanation: a thorough explanation using markdown, **Headers** for sections and `*` for list items. Match length and depth to the level; no artificial word limit.
3. analogy: one simple, relatable analogy for the core concept.

Return only a JSON object:
{{"summary": "...", "detailedExplanation": "...", "analogy": "..."}}""",
        },
    ]
