from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import re
import uuid

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import AuthError, ConflictError, ForbiddenError, NotFoundError, PersistenceError, ValidationError
from ..models import Badge, QuizResult, User, UserProgress
from ..ratelimit import rate_limit
from ..serializers import badge_to_dict, user_to_dict
from ..settings import settings

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(rate_limit)])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class RegisterRequest(BaseModel):
	name: str = ""
	email: str = ""
	password: str = ""


class LoginRequest(BaseModel):
	email: str = ""
	password: str = ""


class ProfileUpdateRequest(BaseModel):
	name: str = ""


def hash_password(password: str) -> str:
	return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
	expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
	to_encode = {"sub": user.id, "email": user.email, "name": user.name, "exp": expire}
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _user_from_token(token: str, db: Session) -> User:
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except ExpiredSignatureError:
		raise AuthError("Token has expired")
	except JWTError:
		raise AuthError("Invalid or expired token")
	user_id = payload.get("sub")
	if not user_id or not payload.get("email"):
		raise AuthError("Invalid token payload")
	user = db.get(User, user_id)
	if user is None:
		raise AuthError("Invalid token payload")
	return user


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	if not token:
		raise AuthError("Access token is required")
	return _user_from_token(token, db)


def get_optional_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Optional[User]:
	if not token:
		return None
	return _user_from_token(token, db)


def require_admin(user: User = Depends(get_current_user)) -> User:
	if user.email.lower() not in settings.admin_emails:
		raise ForbiddenError("Admin access required")
	return user


def _unique_username(db: Session, email: str) -> str:
	base = email.split("@")[0]
	while True:
		candidate = base + uuid.uuid4().hex[:8]
		if db.query(User).filter(User.username == candidate).first() is None:
			return candidate


def _auth_response(user: User) -> dict:
	return {"success": True, "token": create_access_token(user), "user": user_to_dict(user)}


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	name = req.name.strip()
	email = req.email.strip().lower()
	password = req.password
	if not name or not email or not password:
		raise ValidationError("Name, email, and password are required")
	if len(password) < 6:
		raise ValidationError("Password must be at least 6 characters long")
	if not EMAIL_RE.match(email):
		raise ValidationError("Invalid email format")
	if db.query(User).filter(User.email == email).first():
		raise ConflictError("Email already exists")
	user = User(
		name=name,
		email=email,
		password_hash=hash_password(password),
		username=_unique_username(db, email),
	)
	try:
		db.add(user)
		db.commit()
	except IntegrityError as exc:
		db.rollback()
		if db.query(User).filter(User.email == email).first():
			raise ConflictError("Email already exists")
		raise PersistenceError(f"could not create user: {exc.orig}") from exc
	db.refresh(user)
	logger.info("Registered user %s", user.id)
	return _auth_response(user)


@router.post("/login")
async def login(req: LoginRequest, db: Session = Depends(get_db)):
	email = req.email.strip().lower()
	if not email or not req.password:
		raise ValidationError("Email and password are required")
	user = db.query(User).filter(User.email == email).first()
	if not user or not verify_password(req.password, user.password_hash):
		raise AuthError("Invalid credentials")
	return _auth_response(user)


@router.get("/profile")
async def profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	learned = db.query(UserProgress).filter(UserProgress.user_id == user.id, UserProgress.is_learned.is_(True)).count()
	quizzes = db.query(QuizResult).filter(QuizResult.user_id == user.id).count()
	badges = db.query(Badge).filter(Badge.user_id == user.id).order_by(Badge.earned_at.desc()).all()
	return {
		"success": True,
		"user": {
			**user_to_dict(user),
			"createdAt": user.created_at.isoformat(),
			"stats": {
				"wordsLearned": learned,
				"totalBadges": len(badges),
				"quizzesCompleted": quizzes,
				"currentStreak": user.streak.current_days if user.streak else 0,
				"longestStreak": user.streak.longest_days if user.streak else 0,
				"memberSince": user.created_at.isoformat(),
			},
			"recentBadges": [badge_to_dict(b) for b in badges[:5]],
		},
	}


@router.put("/profile")
async def update_profile(req: ProfileUpdateRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	name = req.name.strip()
	if not name:
		raise ValidationError("Name is required")
	row = db.get(User, user.id)
	if row is None:
		raise NotFoundError("User not found")
	row.name = name
	db.commit()
	db.refresh(row)
	return {
		"success": True,
		"user": {**user_to_dict(row), "updatedAt": row.updated_at.isoformat()},
		"message": "Profile updated successfully!",
	}
