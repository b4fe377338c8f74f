"""
Analysis module for StudyPal.

Provides study analytics over the history ledger, tracked topic derivation,
and the LLM-backed flows (study plans, explanations, practice tests,
grading, doubt solving and progress reports).
"""
