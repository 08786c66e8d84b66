"""Form validation for the profile and eligibility screens.

Errors are returned as {field: message}; an empty dict means valid.
"""

import re
from typing import Callable, Dict, List

from journey.state import EligibilityDetails, UserProfile

INSTITUTES: List[str] = [
    "Indian Institute of Technology Bombay",
    "Indian Institute of Science Bangalore",
    "Indian Institute of Technology Delhi",
    "Indian Institute of Technology Madras",
    "Indian Institute of Management Ahmedabad",
    "Indian School of Business",
    "Harvard University",
    "Stanford University",
    "Massachusetts Institute of Technology (MIT)",
]

DEGREE_LEVELS: List[str] = ["Bachelor's", "Master's", "PhD", "Diploma", "Certificate", "Doctorate"]

PROFILE_SUB_STEPS = 3

_NAME_RE = re.compile(r"^[a-zA-Z\s]{2,}$")
_PAN_RE = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")


def valid_name(val: str) -> bool:
    return bool(_NAME_RE.match(val or ""))


def valid_pan(val: str) -> bool:
    return bool(_PAN_RE.match((val or "").upper()))


def valid_email(val: str) -> bool:
    return bool(_EMAIL_RE.match(val or ""))


def valid_mobile(val: str) -> bool:
    """10-digit Indian mobile starting 6-9; spaces are ignored."""
    return bool(_MOBILE_RE.match(re.sub(r"\s", "", val or "")))


# field -> (check, message)
FIELD_RULES: Dict[str, tuple[Callable[[str], bool], str]] = {
    "name": (valid_name, "Please enter a valid full name."),
    "pan": (valid_pan, "Must follow the format ABCDE1234F."),
    "email": (valid_email, "Please enter a valid email (e.g., name@example.com)."),
    "mobile": (valid_mobile, "Must be a 10-digit number starting with 6, 7, 8, or 9."),
    "degree_level": (bool, "Please select your degree level."),
    "course": (lambda v: bool(v) and len(v) >= 3, "Please enter a valid field of study."),
    "institute": (bool, "Please select or enter an institute."),
}

SUB_STEP_FIELDS: Dict[int, List[str]] = {
    1: ["name", "pan"],
    2: ["email", "mobile"],
    3: ["degree_level", "course", "institute"],
}


def validate_field(field: str, value: str) -> str | None:
    """Message for an invalid value, None when valid or the field is unknown."""
    rule = FIELD_RULES.get(field)
    if rule is None:
        return None
    check, message = rule
    return None if check(value or "") else message


def validate_profile_step(step: int, profile: UserProfile) -> Dict[str, str]:
    errors = {}
    for field in SUB_STEP_FIELDS.get(step, []):
        message = validate_field(field, str(profile.get(field) or ""))
        if message:
            errors[field] = message
    return errors


def normalize_profile(profile: UserProfile) -> UserProfile:
    """PAN is always kept upper-case."""
    normalized = dict(profile)
    if normalized.get("pan"):
        normalized["pan"] = str(normalized["pan"]).upper()
    return normalized


def _positive_amount(value) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def validate_eligibility_details(details: EligibilityDetails) -> Dict[str, str]:
    """Fee and income must be chosen (positive amounts) before calculating."""
    errors = {}
    for field in ("course_fee", "parent_income"):
        if not _positive_amount(details.get(field)):
            errors[field] = "Please select an option."
    return errors


def search_institutes(term: str) -> List[str]:
    term = (term or "").lower()
    return [inst for inst in INSTITUTES if term in inst.lower()]
