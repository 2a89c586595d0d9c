"""
CRUD operations for users
"""

from typing import Any, List, Optional, Tuple
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.security import get_password_hash, verify_password
from app.crud.base import CRUDBase
from app.models.base import utcnow
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.user import UserRegister, UserAdminUpdate


class CRUDUser(CRUDBase[User, UserRegister, UserAdminUpdate]):
    """User account operations"""

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def create_user(
        self,
        db: Session,
        *,
        obj_in: UserRegister,
        role: UserRole = UserRole.USER,
        is_verified: bool = False
    ) -> User:
        """Create an account, hashing the password"""
        data = obj_in.model_dump(exclude={"password", "email"})
        db_obj = User(
            **data,
            email=obj_in.email.lower(),
            password_hash=get_password_hash(obj_in.password),
            role=role,
            is_active=True,
            is_verified=is_verified,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(db, email=email)
        if not user:
            # Hash anyway so unknown emails cost the same as wrong passwords
            get_password_hash(password)
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def set_password(self, db: Session, *, user: User, password: str) -> User:
        user.password_hash = get_password_hash(password)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def record_login(self, db: Session, *, user: User) -> User:
        user.last_login = utcnow()
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def get_active_admins(self, db: Session) -> List[User]:
        return db.query(User).filter(User.role == UserRole.ADMIN, User.is_active.is_(True)).all()

    def get_ids(self, db: Session, *, ids: Optional[List[uuid.UUID]] = None) -> List[uuid.UUID]:
        """Ids of all users, or of the subset of ids that exist"""
        query = db.query(User.id)
        if ids is not None:
            query = query.filter(User.id.in_(ids))
        return [row[0] for row in query.all()]

    def search_users(
        self,
        db: Session,
        *,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[User], int]:
        query = db.query(User)
        if role:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern),
            ))
        return self.paginate(query, skip=skip, limit=limit)

    def delete_all_except(self, db: Session, *, keep_id: Any) -> int:
        """Delete every user except one, with their dependent records"""
        users = db.query(User).filter(User.id != keep_id).all()
        for user in users:
            db.delete(user)
        db.commit()
        return len(users)


user = CRUDUser(User)
