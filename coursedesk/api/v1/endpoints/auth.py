import logging
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer
from coursedesk.api.deps import get_registry, get_store
from coursedesk.core import auth, redis_db
from coursedesk.core.config import settings
from coursedesk.core.exceptions import UnauthorizedException
from coursedesk.models import postgresql as models
from coursedesk.schemas import user as schemas
from coursedesk.services.connection_registry import ConnectionRegistry
from coursedesk.services.guard import Identity
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import eq

logger = logging.getLogger(__name__)

router = APIRouter()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


def resolve_session(token: str) -> Optional[str]:
    """User id behind a live session token, or None."""
    user_id = auth.decode_access_token(token)
    if user_id is None:
        return None
    # The session must still exist in Redis (logout deletes it)
    if redis_db.redis_client.get(redis_db.session_key(token)) != user_id:
        return None
    return user_id


def get_current_user(store: EntityStore = Depends(get_store), token: str = Depends(oauth2_scheme)) -> models.User:
    user_id = resolve_session(token)
    if user_id is None:
        raise UnauthorizedException(detail="Session expired or logged out")
    user = store.find_one(models.User, user_id)
    if user is None:
        raise UnauthorizedException(detail="Could not validate credentials")
    return user


def get_identity(current_user: models.User = Depends(get_current_user)) -> Identity:
    return Identity(user_id=current_user.id, role=current_user.role)


def open_session(user: models.User) -> schemas.Token:
    access_token = auth.create_access_token(subject=user.id)
    redis_db.redis_client.setex(
        redis_db.session_key(access_token),
        settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user.id,
    )
    return schemas.Token(access_token=access_token, token_type="bearer", user=schemas.User.model_validate(user))


@router.post("/register", response_model=schemas.Token)
def register(user_in: schemas.UserCreate, store: EntityStore = Depends(get_store)):
    data = user_in.model_dump(exclude={"password"})
    data["role"] = user_in.role.value
    data["hashed_password"] = auth.get_password_hash(user_in.password)
    user = store.insert(models.User, data, conflict="The user with this email already exists in the system.")
    logger.info("Registered %s %s", user.role, user.id)
    return open_session(user)


@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, store: EntityStore = Depends(get_store)):
    user = store.first(models.User, eq("email", credentials.email))
    if not user or not auth.verify_password(credentials.password, user.hashed_password):
        raise UnauthorizedException(detail="Invalid credentials")
    return open_session(user)


@router.post("/logout")
async def logout(
    token: str = Depends(oauth2_scheme),
    registry: ConnectionRegistry = Depends(get_registry),
):
    user_id = auth.decode_access_token(token)
    redis_db.redis_client.delete(redis_db.session_key(token))
    if user_id:
        # A logged out user stops receiving live pushes
        await registry.disconnect(user_id)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=schemas.User)
def read_me(current_user: models.User = Depends(get_current_user)):
    return current_user
