from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID


class CurrentAccount(BaseModel):
    """Caller identity extracted from a verified access token."""
    user_id: UUID = Field(..., description="Authenticated user")
    organization_id: UUID = Field(..., description="Organization the user acts for")
    jti: Optional[str] = Field(None, description="Token unique identifier (JTI)")

    model_config = ConfigDict(frozen=True)
