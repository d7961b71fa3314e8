from enum import Enum
from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, Boolean, DateTime, Index, CheckConstraint, text
from studio.db.base import Base

class PlanType(str, Enum):
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"
    CLASS_PACK_10 = "CLASS_PACK_10"
    CORPORATE = "CORPORATE"

# planos que consomem crédito por aula
CREDIT_PLANS = frozenset({PlanType.CLASS_PACK_10, PlanType.CORPORATE})

class Membership(Base):
    __tablename__ = "memberships"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(Integer, index=True)
    plan_type: Mapped[PlanType]
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    credits_remaining: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_plan_change: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # no máximo um plano ativo por membro
        Index(
            "uq_memberships_active_member", "member_id", unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        CheckConstraint("credits_remaining IS NULL OR credits_remaining >= 0", name="credits_non_negative"),
    )

    @property
    def uses_credits(self) -> bool:
        return self.plan_type in CREDIT_PLANS
