"""Record schemas persisted by the stores.

Everything a store reads back is validated through these models, so a blob
or row with the wrong shape fails loudly instead of leaking half-filled
records into the services.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

COVER_PLACEHOLDER_URL = "https://picsum.photos/seed/{seed}/300/400"


class UserRecord(BaseModel):
    """Stored user identity, including the password digest."""

    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime


class BookRecord(BaseModel):
    """Stored book owned by exactly one user."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    author: str
    cover: str = ""
    description: str
    category: str
    isbn: str = ""
    published_year: int
    user_id: str
    created_at: datetime
    updated_at: datetime

    @property
    def cover_url(self) -> str:
        """The cover URL, or a placeholder seeded by the title's first character."""
        if self.cover and self.cover.startswith("http"):
            return self.cover
        return COVER_PLACEHOLDER_URL.format(seed=self.title[:1].lower())


class SessionRecord(BaseModel):
    """The signed-in user of a client, as kept in the session blob."""

    model_config = ConfigDict(extra="ignore")

    token: str
    expires_at: datetime
    user_id: str
    username: str
    email: str
    created_at: datetime
