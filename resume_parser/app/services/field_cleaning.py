"""
Field cleaning for LLM extraction output - turns untrusted provider fields into a CandidateRecord.
Never raises: missing or malformed values degrade to empty strings / empty lists.
"""
import re
from collections.abc import Mapping
from typing import Any

from resume_parser.app.schemas.candidate import CandidateRecord

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"[^0-9]")

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15


def clean_text(value: Any) -> str:
    """Collapse whitespace runs and trim. Non-strings become ""."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def clean_email(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    email = value.strip().lower()
    return email if EMAIL_PATTERN.fullmatch(email) else ""


def clean_phone(value: Any) -> str:
    """Keep digits only; anything outside 10-15 digits is dropped."""
    if not isinstance(value, str):
        return ""
    digits = _NON_DIGIT.sub("", value)
    return digits if PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS else ""


def clean_skills(value: Any) -> list[str]:
    """
    Clean each skill and drop case-insensitive duplicates.
    First occurrence wins and keeps its casing; order is preserved.
    """
    if not isinstance(value, (list, tuple)):
        return []
    skills: list[str] = []
    seen: set[str] = set()
    for item in value:
        skill = clean_text(item)
        if not skill:
            continue
        key = skill.lower()
        if key in seen:
            continue
        seen.add(key)
        skills.append(skill)
    return skills


def clean_candidate_fields(raw: Any, filename: str = "") -> CandidateRecord:
    """Build a CandidateRecord from raw provider fields."""
    fields = raw if isinstance(raw, Mapping) else {}
    return CandidateRecord(
        name=clean_text(fields.get("name")),
        email=clean_email(fields.get("email")),
        phone=clean_phone(fields.get("phone")),
        skills=tuple(clean_skills(fields.get("skills"))),
        experience_years=clean_text(fields.get("experience_years")),
        education=clean_text(fields.get("education")),
        location=clean_text(fields.get("location")),
        summary=clean_text(fields.get("summary")),
        filename=clean_text(filename),
    )
