"""Submission status values shared by land listings and products."""

from enum import Enum


class SubmissionStatus(str, Enum):
    """Lifecycle status of a submitted record."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


TERMINAL_STATUSES = frozenset({SubmissionStatus.APPROVED, SubmissionStatus.REJECTED})


class StatusFilter(str, Enum):
    """Status filter accepted by list views. ALL applies no predicate."""
    ALL = "all"
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
