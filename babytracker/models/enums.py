"""Enumerations shared by the ORM models, API schemas and graph types.

Values are stored as lowercase strings (``native_enum=False``).
"""

import enum


class MemberRole(str, enum.Enum):
    OWNER = "owner"
    PARENT = "parent"
    CAREGIVER = "caregiver"
    GRANDPARENT = "grandparent"


class MembershipStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class FeedType(str, enum.Enum):
    BOTTLE = "bottle"
    BREAST = "breast"


class BreastSide(str, enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class Gender(str, enum.Enum):
    UNKNOWN = "unknown"
    MALE = "male"
    FEMALE = "female"


# Roles allowed to issue invitations.
INVITER_ROLES = frozenset({MemberRole.OWNER, MemberRole.PARENT})
