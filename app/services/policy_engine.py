"""
Zero-tolerance moderation policy.

Every issue reported by the model blocks the content. The category,
confidence and severity rules only decide which issue is cited as the
blocking reason.
"""

from typing import List, Optional, Tuple

from app.core.logger import logger
from app.schemas.moderation import (
    CRITICAL_VIOLATION_IDS,
    CriticalViolation,
    ModerationIssue,
    ModerationResult,
)

# Substring keyword -> canonical critical violation
CRITICAL_CATEGORY_KEYWORDS = {
    "personal": CriticalViolation.personal_information,
    "violence": CriticalViolation.violence_harassment,
    "adult": CriticalViolation.adult_content_nudity,
    "nudity": CriticalViolation.adult_content_nudity,
    "harmful": CriticalViolation.harmful_dangerous_content,
    "dangerous": CriticalViolation.harmful_dangerous_content,
}

HIGH_CONFIDENCE_THRESHOLD = 70
MEDIUM_CONFIDENCE_THRESHOLD = 60
LOW_CONFIDENCE_THRESHOLD = 50

BLOCKING_CONFIDENCE_THRESHOLD = LOW_CONFIDENCE_THRESHOLD

ZERO_TOLERANCE_REASON = "Zero tolerance policy: any detected issue blocks the upload"


def critical_violation_for(category: Optional[str]) -> Optional[CriticalViolation]:
    """Map a free-form category onto a critical violation by keyword, if any."""
    lowered = (category or "").lower()
    if lowered in CRITICAL_VIOLATION_IDS:
        return CriticalViolation(lowered)
    for keyword, violation in CRITICAL_CATEGORY_KEYWORDS.items():
        if keyword in lowered:
            return violation
    return None


def matches_critical_category(category: Optional[str], violation_category: Optional[str] = None) -> bool:
    """
    Case-insensitive check of an issue category against the critical keywords.

    Also true when the result-level violation category is one of the
    canonical critical identifiers.
    """
    if violation_category in CRITICAL_VIOLATION_IDS:
        return True
    lowered = (category or "").lower()
    return any(keyword in lowered for keyword in CRITICAL_CATEGORY_KEYWORDS)


def blocking_rule(issue: ModerationIssue, violation_category: Optional[str] = None) -> Optional[str]:
    """Return the reason an issue escalates on its own merits, or None."""
    if matches_critical_category(issue.category, violation_category):
        return f"Critical violation category detected: {issue.category}"

    confidence = issue.confidence or 0
    if confidence >= BLOCKING_CONFIDENCE_THRESHOLD:
        return (
            f"Confidence {confidence:g}% meets the {BLOCKING_CONFIDENCE_THRESHOLD}% "
            f"blocking threshold: {issue.category}"
        )

    if issue.severity == "high":
        return f"High severity issue: {issue.category}"

    return None


def _unspecified_violation(result: ModerationResult) -> ModerationIssue:
    return ModerationIssue(
        category=result.violation_category or "Unspecified Violation",
        description="The content was flagged as a violation without further detail.",
        severity="high",
        confidence=result.confidence or None,
    )


def _cite(issues: List[ModerationIssue], violation_category: Optional[str]) -> Tuple[int, str, bool]:
    # An issue that already carries a blocking reason stays the cited one
    for index, issue in enumerate(issues):
        if issue.blocking_reason:
            return index, issue.blocking_reason, True
    for index, issue in enumerate(issues):
        reason = blocking_rule(issue, violation_category)
        if reason:
            return index, reason, True
    return 0, ZERO_TOLERANCE_REASON, False


def apply_zero_tolerance_policy(result: ModerationResult) -> ModerationResult:
    """
    Compute the final, authoritative moderation result.

    Args:
        result: Provisional result from the response parser

    Returns:
        New ModerationResult; status is "failed" exactly when issues exist
    """
    issues = [issue.model_copy() for issue in result.issues]

    if not issues:
        if result.status == "passed":
            return ModerationResult(status="passed", confidence=result.confidence, issues=[])
        issues = [_unspecified_violation(result)]

    index, reason, matched = _cite(issues, result.violation_category)
    cited = issues[index]

    if matched:
        logger.info(
            f"Content blocked: {reason}",
            extra={
                "moderation_status": "failed",
                "issue_category": cited.category,
                "issue_confidence": cited.confidence,
            }
        )
    elif result.status != "failed":
        logger.info(
            "Safety override: blocking content reported as passed with issues",
            extra={"moderation_status": "failed", "issue_count": len(issues)}
        )

    if not cited.blocking_reason:
        issues[index] = cited.model_copy(update={"blocking_reason": reason})

    violation_category = result.violation_category
    if not violation_category:
        violation = critical_violation_for(cited.category)
        violation_category = violation.value if violation else cited.category

    return ModerationResult(
        status="failed",
        confidence=result.confidence,
        violation_category=violation_category,
        issues=issues,
    )
