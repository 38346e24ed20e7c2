# tuitionhub/schemas/common.py
# Shared response pieces: message envelope, pagination block, query filters

import math
from typing import Literal

from pydantic import BaseModel

from tuitionhub.models.application import APPLICATION_STATUSES
from tuitionhub.models.payment import PAYMENT_STATUSES
from tuitionhub.models.tuition import APPROVAL_STATUSES, MEDIUMS, TUITION_STATUSES, TUTORING_TYPES
from tuitionhub.models.user import USER_ROLES, USER_STATUSES

# ── Query Filters ─────────────────────────────────────────────────────────────
# Unknown values fail request validation (400) instead of matching nothing

UserRoleFilter = Literal[USER_ROLES]
UserStatusFilter = Literal[USER_STATUSES]
ApprovalStatusFilter = Literal[APPROVAL_STATUSES]
TuitionStatusFilter = Literal[TUITION_STATUSES]
TutoringTypeFilter = Literal[TUTORING_TYPES]
MediumFilter = Literal[MEDIUMS]
ApplicationStatusFilter = Literal[APPLICATION_STATUSES]
PaymentStatusFilter = Literal[PAYMENT_STATUSES]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total_items=total,
            items_per_page=limit,
        )
