"""Helpers for turning CODE_UNIT_STARTED fields into readable names."""

from collections.abc import Iterable

from apexlens.services.parser.constants import (
    EXTERNAL_MARKER,
    RECORD_ID_FIELD_PATTERN,
    TRIGGER_NAME_PATTERN,
)


def clean_code_unit_name(fields: Iterable[str]) -> str:
    """
    Pick the descriptive field of a code unit event.

    Code unit events look like ``[EXTERNAL]|01q5g000000abcd|AccountTrigger on
    Account trigger event BeforeInsert|__sfdc_trigger/AccountTrigger``. The
    [EXTERNAL] marker and id fields followed by another field are skipped, so
    a fifteen-letter class name in last position is kept.

    Args:
        fields: Detail fields of the event, in order

    Returns:
        The first descriptive field, the last field when every earlier one
        looks like an id, or "Unknown"
    """
    candidates: list[str] = []
    for raw in fields:
        name = raw.strip()
        if name.startswith(EXTERNAL_MARKER):
            name = name[len(EXTERNAL_MARKER) :].strip()
        name = name.strip("| ")
        if name:
            candidates.append(name)

    for name in candidates[:-1]:
        if not RECORD_ID_FIELD_PATTERN.match(name):
            return name
    return candidates[-1] if candidates else "Unknown"


def format_entry_point(code_unit_name: str) -> str:
    """Shorten trigger code unit names: "X on Y trigger event Z" -> "X on Y (Z)"."""
    match = TRIGGER_NAME_PATTERN.match(code_unit_name)
    if match:
        return f"{match.group('trigger')} on {match.group('object')} ({match.group('event')})"
    return code_unit_name


def method_name_from_code_unit(code_unit_name: str) -> str:
    """Last dotted segment of a code unit name ("Cls.method" -> "method")."""
    if "." in code_unit_name:
        return code_unit_name.split(".")[-1]
    return code_unit_name


def method_entry_name(fields: tuple[str, ...]) -> str:
    """Method signature of a METHOD_ENTRY/METHOD_EXIT event (last detail field)."""
    if len(fields) > 1 and fields[-1].strip():
        return fields[-1].strip()
    return "Unknown Method"
