"""
Prompt templates for the in-app help assistant and the doubt solver.
"""
from __future__ import annotations

APP_FEATURES = """- **Dashboard**: weekly progress overview, a personalized study plan generator and quick actions.
- **Explanations**: break down a topic at Simple, Detailed or Expert level.
- **Practice**: generate a timed practice test for any subject and topic; answers are graded automatically.
- **Analytics**: study time, topic mastery and score distribution charts; manage which topics are tracked.
- **Progress**: generate an AI summary of the last week of work.
- **History**: every generated study plan, explanation, test and report.
- **Profile**: update name, class, field of study and institution.
- **Students**: (parents and teachers) manage a roster, view each student's results and assign tests."""


def build_ask_question_prompt(question: str) -> list[dict]:
    """Build prompt messages for a question about using StudyPal."""
    return [
        {
            "role": "system",
            "content": f"""You are the friendly support assistant of the StudyPal app. Answer questions about how to use it.

StudyPal features:
{APP_FEATURES}""",
        },
        {
            "role": "user",
            "content": f"""{question}

Answer clearly and concisely, using markdown **headers** and `*` lists where useful.
Return only a JSON object: {{"answer": "..."}}""",
        },
    ]


def build_solve_doubt_prompt(doubt: str) -> list[dict]:
    """Build prompt messages for an academic question."""
    return [
        {
            "role": "system",
            "content": (
                "You are an expert tutor for students of all ages. Answer academic "
                "questions step by step, breaking complex ideas into simple parts."
            ),
        },
        {
            "role": "user",
            "content": f"""My doubt: {doubt}

Use markdown **headers** for important sections and `*` for lists.
Return only a JSON object: {{"answer": "..."}}""",
        },
    ]
