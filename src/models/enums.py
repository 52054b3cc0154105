from __future__ import annotations

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    RETURNED = "RETURNED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CommentType(str, enum.Enum):
    SUBMISSION = "SUBMISSION"
    APPROVAL = "APPROVAL"
    RETURN = "RETURN"
    REJECTION = "REJECTION"
    GENERAL = "GENERAL"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class MemberRole(str, enum.Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class OcrStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
