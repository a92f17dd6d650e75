"""User repository - collection access for user accounts"""

from typing import Optional

from ...repository import CollectionRepository, Record


class UserRepository(CollectionRepository):
    """Repository for the users collection"""

    collection = "users"

    def get_by_email(self, email: str) -> Optional[Record]:
        wanted = (email or "").strip().lower()
        return self.first(lambda u: (u.get("email") or "").lower() == wanted)

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        user = self.get_by_email(email)
        return user is not None and user.get("id") != exclude_id

    def has_role(self, role: str) -> bool:
        return self.first(lambda u: u.get("role") == role) is not None
