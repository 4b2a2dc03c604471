from sqlalchemy.orm import Session

from backend.models.user import Role, User


class UserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_in_tenant(self, user_id: str, tenant_id: str, role: Role | None = None) -> User | None:
        query = self.db.query(User).filter(User.id == user_id, User.tenant_id == tenant_id)
        if role is not None:
            query = query.filter(User.role == role.value)
        return query.first()
