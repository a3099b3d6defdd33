"""API Key data model.

Stores hashed API keys for authentication.
Plaintext keys are never stored, only SHA-256 hashes.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

from keygate.utils.datetime import utcnow

if TYPE_CHECKING:
    from keygate.models.account import Account


class ApiKey(SQLModel, table=True):
    """API key owned by exactly one account.

    ``is_active`` only ever moves from True to False (revocation).
    """

    __tablename__ = "api_keys"

    id: str = Field(primary_key=True)
    owner_id: str = Field(foreign_key="accounts.id", index=True)
    name: str = Field(default="")
    key_hash: str = Field(index=True)  # SHA-256 hex digest
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    deactivated_at: Optional[datetime] = Field(default=None)

    # Usage tracking is not implemented; never populated
    last_used_at: Optional[datetime] = Field(default=None)

    owner: Optional["Account"] = Relationship(back_populates="api_keys")
