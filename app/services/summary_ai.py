"""
Performance summaries from the text-generation oracle.

The oracle is slow and may fail. Every request carries a generation token;
when a newer request has been issued for the same viewer by the time a
response arrives, the response is discarded instead of shown.
"""
import itertools
import logging
import threading
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from app.core import prompts
from app.core.config import settings
from app.core.exceptions import AIError
from app.schemas.metrics import ReliabilityResult
from app.schemas.records import Report
from app.services.metrics import criteria_averages
from app.services.openrouter_client import call_openrouter

logger = logging.getLogger(__name__)


class SummaryStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"  # oracle error, fallback text returned
    STALE = "stale"  # superseded by a newer request, text discarded
    EMPTY = "empty"  # nothing to summarize


class SummaryResult(BaseModel):
    token: int
    status: SummaryStatus
    text: Optional[str] = None


class SummaryGenerations:
    """Monotonically increasing request tokens for one viewer."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._latest = 0

    def issue(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    @property
    def latest(self) -> int:
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest


class GenerationRegistry:
    """One SummaryGenerations per viewer key."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: Dict[str, SummaryGenerations] = {}

    def for_key(self, key: str) -> SummaryGenerations:
        with self._lock:
            if key not in self._by_key:
                self._by_key[key] = SummaryGenerations()
            return self._by_key[key]


summary_generations = GenerationRegistry()


def summarize_performance(reasonings: List[str], averages: List[Dict]) -> str:
    """Single-paragraph summary from reasoning snippets and criterion averages."""
    messages = [
        {"role": "system", "content": prompts.PERFORMANCE_SUMMARY_SYSTEM},
        {
            "role": "user",
            "content": prompts.PERFORMANCE_SUMMARY_USER_TEMPLATE.format(
                scores=prompts.format_scores(averages),
                reasonings=prompts.format_reasonings(reasonings),
            ),
        },
    ]
    return call_openrouter(messages)


def summarize_team_performance(
    reasonings: List[str],
    averages: List[Dict],
    reliability: Optional[ReliabilityResult],
) -> str:
    if reliability is None:
        reliability_text = "- Submission Reliability Rate: not available (no reports expected)"
    else:
        reliability_text = (
            f"- Submission Reliability Rate: {reliability.rate:.1f}%\n"
            f"- Expected Reports: {reliability.expected}\n"
            f"- Actual Reports: {reliability.actual}"
        )
    messages = [
        {"role": "system", "content": prompts.TEAM_SUMMARY_SYSTEM},
        {
            "role": "user",
            "content": prompts.TEAM_SUMMARY_USER_TEMPLATE.format(
                reasonings=prompts.format_reasonings(reasonings[:prompts.MAX_TEAM_SNIPPETS]),
                scores=prompts.format_scores(averages),
                reliability=reliability_text,
            ),
        },
    ]
    return call_openrouter(messages)


def summary_inputs(reports: Iterable[Report]) -> tuple:
    reports = list(reports)
    reasonings = [r.evaluation_reasoning for r in reports if r.evaluation_reasoning]
    averages = [{"name": c.name, "score": c.average_score} for c in criteria_averages(reports)]
    return reasonings, averages


def generate_summary(
    reports: Sequence[Report],
    generations: SummaryGenerations,
    token: Optional[int] = None,
    reliability: Optional[ReliabilityResult] = None,
    team: bool = False,
    summarizer: Optional[Callable[..., str]] = None,
) -> SummaryResult:
    """
    Ask the oracle for a summary and guard the answer with a generation token.
    Oracle failures are never propagated: they yield the fallback text.
    """
    if token is None:
        token = generations.issue()
    if not reports:
        return SummaryResult(token=token, status=SummaryStatus.EMPTY)

    reasonings, averages = summary_inputs(reports)
    try:
        if summarizer is not None:
            text = summarizer(reasonings, averages)
        elif team:
            text = summarize_team_performance(reasonings, averages, reliability)
        else:
            text = summarize_performance(reasonings, averages)
        status = SummaryStatus.OK
    except AIError as e:
        logger.warning(f"Summary generation failed: {e.message}", extra={"token": token})
        text = settings.summary_fallback_text
        status = SummaryStatus.FAILED

    if not generations.is_current(token):
        logger.info(
            "Discarding stale summary",
            extra={"token": token, "latest": generations.latest},
        )
        return SummaryResult(token=token, status=SummaryStatus.STALE)

    return SummaryResult(token=token, status=status, text=text)
