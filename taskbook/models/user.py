from sqlmodel import SQLModel, Field
from datetime import datetime

class Profile(SQLModel, table=True):
    """Denormalized user profile, keyed by the identity-provider account id."""
    __tablename__ = "users"

    id: str = Field(primary_key=True)
    name: str = ""
    email: str = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
