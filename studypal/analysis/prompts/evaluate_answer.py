"""
Prompt template for grading one typed answer against the answer key.
"""
from __future__ import annotations


def build_evaluate_answer_prompt(question: str, student_answer: str, correct_answer: str) -> list[dict]:
    return [
        {
            "role": "system",
            "content": "You are a fair examiner grading short answers.",
        },
        {
            "role": "user",
            "content": f"""Decide whether the student's answer is correct.

Question: {question}
Correct answer: {correct_answer}
Student answer: {student_answer or '(no answer)'}

Accept answers that mean the same thing: equivalent numbers or units,
synonyms, different word order, minor spelling mistakes. An empty answer is
never correct.

Return only a JSON object:
{{"isCorrect": true or false, "feedback": "<one sentence for the student>"}}""",
        },
    ]
