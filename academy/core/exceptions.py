"""Student ID allocation errors"""

from typing import Optional


class AllocationError(Exception):
    """
    Base class for every failure of student ID allocation.

    Any AllocationError means no id was issued and the branch counter was
    not incremented. Callers must not fall back to a generated id.
    """
    code = "ALLOCATION_FAILED"
    retryable = False

    def __init__(self, message: str, branch: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.branch = branch


class InvalidBranch(AllocationError):
    """The branch is not one of the configured branches"""
    code = "INVALID_BRANCH"

    def __init__(self, branch: object):
        super().__init__(f"Invalid branch: {branch!r}", branch=str(branch))


class AllocationConflict(AllocationError):
    """Every attempt lost a write-write race on the branch counter"""
    code = "ALLOCATION_CONFLICT"
    retryable = True

    def __init__(self, branch: str, attempts: int):
        super().__init__(
            f"Could not reserve a student ID for {branch} after {attempts} attempts",
            branch=branch,
        )
        self.attempts = attempts


class StorageFault(AllocationError):
    """The counter store failed for a reason other than a write conflict"""
    code = "STORAGE_FAULT"
    retryable = True

    def __init__(self, message: str, branch: Optional[str] = None):
        super().__init__(message, branch=branch)
