"""Exit eligibility verdicts computed from activation and current epochs."""

from .evaluator import (
    Eligible,
    EligibilityEvaluator,
    EligibilityVerdict,
    NotEligible,
    Unknown,
    evaluate_eligibility,
    format_wait,
)

__all__ = [
    "Eligible",
    "EligibilityEvaluator",
    "EligibilityVerdict",
    "NotEligible",
    "Unknown",
    "evaluate_eligibility",
    "format_wait",
]
