"""
Eligibility Evaluator

Decides whether a (normalized) student profile passes a drive's
eligibility rule. Pure: the verdict depends only on the rule, the profile
and the drive's CTC / unplaced-only flag, so the same function backs the
apply-time check and the UI eligibility preview.

Criteria are checked in a fixed order and the first failure wins:
1. minimum CGPA
2. allowed departments (normalized on both sides)
3. maximum backlogs
4. allowed batches (unknown batch fails a batch-restricted rule)
5. placement status: placed students only for upgrade drives (CTC above
   the threshold), never for unplaced-only drives
"""

from dataclasses import dataclass, field
from typing import List, Optional

from placement_portal.models.drive import EligibilityRule, JobDrive
from placement_portal.services.profile_normalizer import (
    NormalizedProfile,
    normalize_batch,
    normalize_department,
)

DEFAULT_UPGRADE_CTC = 10.0


@dataclass
class EligibilityReport:
    """Per-criterion verdicts, in evaluation order."""
    meets_cgpa: bool = True
    meets_department: bool = True
    meets_backlogs: bool = True
    meets_batch: bool = True
    meets_placement_status: bool = True
    reasons: List[str] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return not self.reasons


def _check_cgpa(rule: EligibilityRule, profile: NormalizedProfile) -> Optional[str]:
    if rule.min_cgpa is not None and rule.min_cgpa > profile.cgpa:
        return f"Minimum CGPA {rule.min_cgpa} required"
    return None


def _check_department(rule: EligibilityRule, profile: NormalizedProfile) -> Optional[str]:
    if rule.allowed_departments:
        allowed = {normalize_department(d) for d in rule.allowed_departments}
        if profile.department not in allowed:
            return "Department not eligible"
    return None


def _check_backlogs(rule: EligibilityRule, profile: NormalizedProfile) -> Optional[str]:
    if rule.max_backlogs is not None and rule.max_backlogs < profile.backlogs:
        return f"At most {rule.max_backlogs} backlogs allowed"
    return None


def _check_batch(rule: EligibilityRule, profile: NormalizedProfile) -> Optional[str]:
    if rule.allowed_batches:
        allowed = {normalize_batch(b) for b in rule.allowed_batches}
        if profile.batch is None or profile.batch not in allowed:
            return "Batch not eligible"
    return None


def _check_placement_status(profile: NormalizedProfile, drive: JobDrive,
                            upgrade_ctc: float) -> Optional[str]:
    if not profile.is_placed:
        return None
    if drive.unplaced_only:
        return "Drive is open to unplaced students only"
    if drive.ctc is None or drive.ctc <= upgrade_ctc:
        return f"Placed students may only apply to drives above {upgrade_ctc:g} LPA"
    return None


def explain(rule: EligibilityRule, profile: NormalizedProfile, drive: JobDrive,
            upgrade_ctc: float = DEFAULT_UPGRADE_CTC) -> EligibilityReport:
    """Evaluate every criterion and report each verdict (preview screens)."""
    report = EligibilityReport()
    checks = [
        ("meets_cgpa", _check_cgpa(rule, profile)),
        ("meets_department", _check_department(rule, profile)),
        ("meets_backlogs", _check_backlogs(rule, profile)),
        ("meets_batch", _check_batch(rule, profile)),
        ("meets_placement_status", _check_placement_status(profile, drive, upgrade_ctc)),
    ]
    for attr, reason in checks:
        if reason:
            setattr(report, attr, False)
            report.reasons.append(reason)
    return report


def first_failure(rule: EligibilityRule, profile: NormalizedProfile, drive: JobDrive,
                  upgrade_ctc: float = DEFAULT_UPGRADE_CTC) -> Optional[str]:
    """Reason of the first failing criterion, short-circuiting; None if eligible."""
    return (
        _check_cgpa(rule, profile)
        or _check_department(rule, profile)
        or _check_backlogs(rule, profile)
        or _check_batch(rule, profile)
        or _check_placement_status(profile, drive, upgrade_ctc)
    )


def evaluate(rule: EligibilityRule, profile: NormalizedProfile, drive: JobDrive,
             upgrade_ctc: float = DEFAULT_UPGRADE_CTC) -> bool:
    return first_failure(rule, profile, drive, upgrade_ctc) is None
