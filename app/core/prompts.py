"""
Centralized AI Prompt Repository
- Keeps summarization prompts out of the service logic
- Facilitates auditing and refinement
"""

from typing import Any, Dict, List

# --- INDIVIDUAL PERFORMANCE SUMMARY ---
PERFORMANCE_SUMMARY_SYSTEM = (
    "You are a Senior Engineering Manager with 15 years of experience. "
    "Your tone is professional, direct, and growth-oriented."
)

PERFORMANCE_SUMMARY_USER_TEMPLATE = (
    "Based on the following average performance scores and individual report reasoning snippets, "
    "generate a single, comprehensive paragraph summarizing the employee's performance for this period. "
    "The summary should be constructive and highlight both strengths and areas for potential improvement.\n\n"
    "Average Scores:\n{scores}\n\n"
    "Reasoning Snippets from Reports:\n{reasonings}\n\n"
    "Summary:"
)

# --- TEAM PERFORMANCE SUMMARY ---
TEAM_SUMMARY_SYSTEM = """You are a Senior Engineering Manager with 15 years of experience. Your task is to provide a comprehensive summary of your team's collective performance for the selected period. Your tone is professional, direct, and growth-oriented.

Your summary should follow this structure:
- **Team Overview**: A high-level summary of collective performance.
- **Performance Trends & Skill Gaps**: Analysis of the criteria scores.
- **Accountability & Engagement**: Commentary on the report reliability metrics.
"""

TEAM_SUMMARY_USER_TEMPLATE = (
    "### PERFORMANCE DATA:\n\n"
    "1. REPRESENTATIVE REASONING SNIPPETS:\n{reasonings}\n\n"
    "2. CRITERIA AVERAGES (Skill Levels):\n{scores}\n\n"
    "3. ACCOUNTABILITY METRICS:\n{reliability}\n\n"
    "Please provide the summary now."
)

MAX_TEAM_SNIPPETS = 15


def format_scores(criteria_averages: List[Dict[str, Any]]) -> str:
    return "\n".join(f"- {c['name']}: {c['score']:.2f}/10" for c in criteria_averages)


def format_reasonings(reasonings: List[str]) -> str:
    return "\n".join(f'- "{r}"' for r in reasonings)
