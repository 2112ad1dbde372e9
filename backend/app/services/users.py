import logging
from sqlalchemy.orm import Session
from app.core.auth import hash_password, verify_password
from app.core.database import transaction
from app.core.errors import AuthenticationError, ConflictError
from app.core.timeutils import utcnow
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.user import UserRegister

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def register(self, data: UserRegister) -> User:
        email = data.email.strip().lower()
        with transaction(self.db):
            if self.users.get_by_email(email):
                raise ConflictError("User with this email already exists")
            user = self.users.add(
                User(
                    name=data.name,
                    email=email,
                    password_hash=hash_password(data.password),
                    is_active=True,
                )
            )
        logger.info("New user registered", extra={"user_id": user.id})
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("This account has been deactivated")

        with transaction(self.db):
            user.last_login = utcnow()
        return user
