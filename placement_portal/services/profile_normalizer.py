"""
Profile & Drive Normalizer

PURPOSE:
Student profiles and drive payloads reach us in several shapes written by
different versions of the portal:
- department as "CSE", " cse", "Cse " ...
- batch stored as `batch`, or only as `graduation_year` / `graduationYear`
- camelCase keys (`currentBacklogs`, `isPlaced`) next to snake_case ones
- drive eligibility keyed as `cgpa` / `minCGPA` / `min_cgpa`, etc.

Everything that compares or evaluates goes through this module, so the
eligibility and pipeline code only ever sees canonical values.

Missing or garbage data degrades to the most restrictive comparable value
(CGPA 0, batch unknown), never to "automatically eligible".
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from placement_portal.models.drive import StudentSnapshot


@dataclass(frozen=True)
class NormalizedProfile:
    department: str
    batch: Optional[str]
    cgpa: float
    backlogs: int
    is_placed: bool


# ============================================================
# HELPERS
# ============================================================

def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    """Value of the first key that is present and not None/blank."""
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _year_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def normalize_department(value: Any) -> str:
    """Lower-case, trim and collapse inner whitespace."""
    if value is None:
        return ""
    return " ".join(str(value).split()).lower()


def normalize_batch(value: Any) -> Optional[str]:
    return _year_string(value)


# ============================================================
# STUDENT PROFILE
# ============================================================

def normalize_profile(raw: Optional[Mapping[str, Any]]) -> NormalizedProfile:
    """Derive the canonical comparison tuple from a stored profile."""
    raw = raw or {}

    batch = _year_string(_first(raw, "batch"))
    if batch is None:
        batch = _year_string(_first(raw, "graduation_year", "graduationYear"))

    placement_status = str(_first(raw, "placement_status", "placementStatus") or "").lower()

    return NormalizedProfile(
        department=normalize_department(_first(raw, "department")),
        batch=batch,
        cgpa=_to_float(_first(raw, "cgpa")),
        backlogs=max(0, _to_int(_first(raw, "current_backlogs", "currentBacklogs", "backlogs"))),
        is_placed=bool(_first(raw, "is_placed", "isPlaced")) or placement_status == "placed",
    )


def is_profile_complete(raw: Optional[Mapping[str, Any]]) -> bool:
    """Completion flag written by the profile completion calculator."""
    raw = raw or {}
    return bool(_first(raw, "is_profile_complete", "isProfileComplete"))


def missing_profile_fields(raw: Optional[Mapping[str, Any]]) -> List[str]:
    raw = raw or {}
    return list(_first(raw, "missing_fields", "missingFields") or [])


def build_student_snapshot(email: str, raw: Optional[Mapping[str, Any]],
                           fallback_name: Optional[str] = None) -> StudentSnapshot:
    """Contact details copied onto an application at apply time."""
    raw = raw or {}
    phone = _first(raw, "phone_number", "phoneNumber", "mobile_number", "mobileNumber", "phone")
    return StudentSnapshot(
        name=str(_first(raw, "name") or fallback_name or "N/A"),
        roll_number=str(_first(raw, "roll_number", "rollNumber") or "N/A"),
        department=str(_first(raw, "department") or "N/A").strip(),
        email=email,
        phone=str(phone) if phone is not None else None,
    )


# ============================================================
# DRIVE PAYLOADS
# ============================================================

ELIGIBILITY_ALIASES = {
    "min_cgpa": ("min_cgpa", "minCGPA", "cgpa"),
    "max_backlogs": ("max_backlogs", "maxBacklogs"),
    "allowed_departments": ("allowed_departments", "allowedDepartments", "departments"),
    "allowed_batches": ("allowed_batches", "allowedBatches", "batches"),
}

DRIVE_ALIASES = {
    "company_name": ("company_name", "companyName"),
    "job_type": ("job_type", "jobType", "type"),
    "drive_mode": ("drive_mode", "driveMode"),
    "unplaced_only": ("unplaced_only", "unplacedOnly"),
    "is_active": ("is_active", "isActive"),
    "selection_rounds": ("selection_rounds", "selectionRounds"),
    "placed_students": ("placed_students", "placedStudents"),
    "created_by": ("created_by", "createdBy"),
}


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


def normalize_eligibility(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Collapse eligibility aliases. Blank criteria become 'unrestricted'."""
    raw = raw or {}
    min_cgpa = _first(raw, *ELIGIBILITY_ALIASES["min_cgpa"])
    max_backlogs = _first(raw, *ELIGIBILITY_ALIASES["max_backlogs"])

    return {
        "min_cgpa": _to_float(min_cgpa, default=None),
        "max_backlogs": _to_int(max_backlogs, default=None),
        "allowed_departments": _string_list(_first(raw, *ELIGIBILITY_ALIASES["allowed_departments"])),
        "allowed_batches": [
            b for b in (normalize_batch(item) for item in _string_list(
                _first(raw, *ELIGIBILITY_ALIASES["allowed_batches"])))
            if b
        ],
    }


def normalize_drive_payload(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Canonical drive dict from a request body or a legacy stored document.

    Canonical keys pass through untouched; aliased keys are folded into
    their canonical name and dropped. Unknown keys are kept so the model
    decides what to do with them.
    """
    data = dict(raw)
    for canonical, aliases in DRIVE_ALIASES.items():
        value = _first(data, *aliases)
        for alias in aliases:
            data.pop(alias, None)
        if value is not None:
            data[canonical] = value

    finalized = _first(data, "placement_finalized", "placementFinalized")
    data.pop("placement_finalized", None)
    data.pop("placementFinalized", None)
    if finalized and "stage" not in data:
        data["stage"] = "finalized"

    if "eligibility" in data:
        data["eligibility"] = normalize_eligibility(data["eligibility"])

    if not data.get("locations") and data.get("location"):
        data["locations"] = [data["location"]]

    return data
