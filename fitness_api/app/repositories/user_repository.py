"""
Repository for the ``users`` collection.
"""

from typing import Any, Dict, List, Optional, Sequence

from .base import BaseRepository


class UserRepository(BaseRepository):
    collection_name = "users"

    def ensure_indexes(self) -> None:
        self.collection.create_index("email", unique=True)
        self.collection.create_index("role")

    def find_by_email(self, email: str, include_deleted: bool = False) -> Optional[Dict[str, Any]]:
        return self.find_one({"email": email.strip().lower()}, include_deleted=include_deleted)

    def find_by_roles(self, roles: Sequence[str]) -> List[Dict[str, Any]]:
        return self.find({"role": {"$in": list(roles)}}, sort=[("created_at", -1)])

    def exists_with_role(self, role: str) -> bool:
        return self.count({"role": role}) > 0
