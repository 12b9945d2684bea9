"""Subscription plan redaction, applied last to the recommendation."""

from __future__ import annotations

import copy

from placecheck.models import RecommendResult, Rewrite

PLANS = ("free", "pro")
FREE_KEYWORDS = 3
FREE_TODOS = 2
FREE_NOTES = 1
LOCKED_DESCRIPTION = "🔒 PRO에서 ‘상세설명 복붙 완성본’이 제공됩니다."
LOCKED_DIRECTIONS = "🔒 PRO에서 ‘찾아오는 길 복붙 완성본’이 제공됩니다."


def apply_plan(plan: str, result: RecommendResult) -> RecommendResult:
    """Return a redacted copy of ``result``; the input is never mutated."""

    if plan == "pro":
        return copy.deepcopy(result)
    if plan != "free":
        raise ValueError(f"Unknown plan: {plan!r}")

    return RecommendResult(
        keywords5=copy.deepcopy(result.keywords5[:FREE_KEYWORDS]),
        rewrite=Rewrite(description=LOCKED_DESCRIPTION, directions=LOCKED_DIRECTIONS),
        todo_top5=copy.deepcopy(result.todo_top5[:FREE_TODOS]),
        compliance_notes=list(result.compliance_notes[:FREE_NOTES]),
    )
