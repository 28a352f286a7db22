"""Branch registry and student ID formatting"""

import re
from typing import Dict, Optional, Tuple, Union

from academy.config import settings
from academy.core.exceptions import InvalidBranch
from academy.models.enums import Branch

# Two-letter prefix of every student ID issued by a branch
BRANCH_CODES: Dict[Branch, str] = {
    Branch.WARDHA: "WR",
    Branch.NAGPUR: "NG",
    Branch.BUTIBORI: "BR",
    Branch.AKOLA: "AK",
}

BRANCH_NAMES: Dict[Branch, str] = {
    Branch.WARDHA: "Wardha",
    Branch.NAGPUR: "Nagpur",
    Branch.BUTIBORI: "Butibori",
    Branch.AKOLA: "Akola",
}

_CODE_TO_BRANCH = {code: branch for branch, code in BRANCH_CODES.items()}
_STUDENT_ID_RE = re.compile(r"^([A-Z]{2})(\d+)$")


def normalize_branch(value: Union[Branch, str, None]) -> Branch:
    """
    Resolve user input to a Branch.

    Accepts Branch members and their values ("Nagpur ", "NAGPUR" -> NAGPUR).
    Raises InvalidBranch for anything else.
    """
    if isinstance(value, Branch):
        return value
    if not isinstance(value, str):
        raise InvalidBranch(value)
    try:
        return Branch(value.strip().lower())
    except ValueError:
        raise InvalidBranch(value) from None


def branch_code(branch: Branch) -> str:
    return BRANCH_CODES[branch]


def format_student_id(branch: Branch, number: int, width: Optional[int] = None) -> str:
    """
    Render a sequence number as a student ID, e.g. (NAGPUR, 42) -> "NG0042".

    Numbers wider than the padding keep all their digits.
    """
    if number < 1:
        raise ValueError(f"Student ID sequence numbers start at 1, got {number}")
    width = width or settings.STUDENT_ID_WIDTH
    return f"{BRANCH_CODES[branch]}{number:0{width}d}"


def parse_student_id(student_id: str) -> Tuple[Branch, int]:
    """Split a student ID back into (branch, sequence number)"""
    match = _STUDENT_ID_RE.match(student_id.strip().upper())
    if not match or match.group(1) not in _CODE_TO_BRANCH:
        raise ValueError(f"Not a student ID: {student_id!r}")
    return _CODE_TO_BRANCH[match.group(1)], int(match.group(2))
