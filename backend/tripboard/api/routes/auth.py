"""
Authentication routes for signup and login.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from tripboard.core.exceptions import AuthenticationError, ValidationError
from tripboard.core.security import verify_password, get_password_hash, create_access_token
from tripboard.db.session import get_db
from tripboard.models.user import User, UserRole, UserStatus
from tripboard.schemas.user import UserCreate, UserLogin, Token, SignupResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email, "role": user.role.value})


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user.

    The very first account becomes an active admin; later accounts wait for
    an admin to approve them.
    """
    email = user_data.email.strip().lower()
    existing_email = db.query(User).filter(User.email == email).first()
    if existing_email:
        raise ValidationError("Email already in use")

    is_first_user = db.query(User).count() == 0
    new_user = User(
        email=email,
        hashed_password=get_password_hash(user_data.password),
        role=UserRole.ADMIN if is_first_user else UserRole.MEMBER,
        status=UserStatus.ACTIVE if is_first_user else UserStatus.PENDING,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    if not is_first_user:
        return SignupResponse(status=UserStatus.PENDING, message="Account pending admin approval")

    logger.info(f"Bootstrap admin account created: {new_user.email}")
    return SignupResponse(
        status=UserStatus.ACTIVE,
        message="Admin account created",
        access_token=issue_token(new_user),
        token_type="bearer",
    )


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = db.query(User).filter(User.email == credentials.email.strip().lower()).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")

    if user.status == UserStatus.PENDING:
        raise AuthenticationError("Account pending approval")

    if user.status == UserStatus.REJECTED:
        raise AuthenticationError("Account rejected")

    return {"access_token": issue_token(user), "token_type": "bearer"}
