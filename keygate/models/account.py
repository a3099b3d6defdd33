"""Account data model.

Accounts are owned by the external identity system. Keygate reads the plan
and email state and only writes the email confirmation fields.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

from keygate.models.plan import PlanType
from keygate.utils.datetime import utcnow

if TYPE_CHECKING:
    from keygate.models.api_key import ApiKey


class Account(SQLModel, table=True):
    """User account with a subscription plan."""

    __tablename__ = "accounts"

    id: str = Field(primary_key=True)
    email: str = Field(unique=True, index=True)
    first_name: str = Field(default="")
    last_name: str = Field(default="")

    plan: PlanType = Field(default=PlanType.FREE)

    # Email verification
    email_confirmed: bool = Field(default=False)
    email_confirmation_token_hash: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)

    api_keys: list["ApiKey"] = Relationship(back_populates="owner")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
