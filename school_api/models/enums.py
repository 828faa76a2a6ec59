"""Enums shared by every moderated, class-scoped resource."""

import enum


class ApprovalStatus(str, enum.Enum):
    draft = "draft"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    sent = "sent"


class VisibilityScope(str, enum.Enum):
    school_wide = "school_wide"
    class_specific = "class_specific"
    teacher_specific = "teacher_specific"
    direct = "direct"


# Statuses in which a moderated resource is visible to its audience
PUBLISHED_STATUSES = frozenset({ApprovalStatus.approved, ApprovalStatus.sent})
