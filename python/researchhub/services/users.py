"""User bootstrap service.

Provides race-safe user creation on first sign-in. The identity layer issues
the token; this service mirrors the identity into the users table.
"""

from collections.abc import Callable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from researchhub.db.models import User, utcnow
from researchhub.db.session import transaction
from researchhub.errors import ApiErrorCode, ConflictError, NotFoundError
from researchhub.logging import get_logger
from researchhub.repositories import UserRepository
from researchhub.schemas.user import UserOut

logger = get_logger(__name__)


def ensure_user(
    db: Session,
    user_id: UUID,
    email: str,
    name: str | None = None,
    avatar_url: str | None = None,
    provider: str | None = None,
) -> User:
    """Ensure a user row exists for the token subject.

    This function is race-safe and idempotent:
    - The first call creates the row
    - Later calls may refresh name and avatar_url
    - email and provider are never changed once set

    Args:
        db: Database session.
        user_id: The user's ID (from JWT sub claim).
        email: Email address from the token.
        name: Display name (optional).
        avatar_url: Profile picture URL (optional).
        provider: Sign-in provider, e.g. "google" (optional).

    Returns:
        The user row.

    Raises:
        ConflictError: If the email already belongs to a different user.
    """
    repo = UserRepository(db)

    with transaction(db):
        user = repo.find_by_id(user_id)

        if user is None:
            user = _create_user(db, repo, user_id, email, name, avatar_url, provider)
        else:
            _refresh_profile(user, name, avatar_url)

    return user


def _create_user(
    db: Session,
    repo: UserRepository,
    user_id: UUID,
    email: str,
    name: str | None,
    avatar_url: str | None,
    provider: str | None,
) -> User:
    existing = repo.find_by_email(email)
    if existing is not None and existing.id != user_id:
        raise ConflictError(ApiErrorCode.E_EMAIL_TAKEN, "Email is already registered")

    try:
        with db.begin_nested():
            user = repo.save(
                User(
                    id=user_id,
                    email=email,
                    name=name,
                    avatar_url=avatar_url,
                    provider=provider,
                )
            )
        logger.info("user_created", user_id=str(user_id), provider=provider)
        return user
    except IntegrityError:
        # Lost race: a concurrent request created the same user
        user = repo.find_by_id(user_id)
        if user is None:
            raise ConflictError(
                ApiErrorCode.E_EMAIL_TAKEN, "Email is already registered"
            ) from None
        logger.info("user_create_race_recovered", user_id=str(user_id))
        return user


def _refresh_profile(user: User, name: str | None, avatar_url: str | None) -> None:
    changed = False
    if name is not None and name != user.name:
        user.name = name
        changed = True
    if avatar_url is not None and avatar_url != user.avatar_url:
        user.avatar_url = avatar_url
        changed = True
    if changed:
        user.updated_at = utcnow()


def get_user(db: Session, user_id: UUID) -> UserOut:
    """Get a user's profile.

    Raises:
        NotFoundError: If the user does not exist.
    """
    user = UserRepository(db).find_by_id(user_id)
    if user is None:
        raise NotFoundError(ApiErrorCode.E_NOT_FOUND, "User not found")
    return UserOut.model_validate(user)


def create_bootstrap_callback(db: Session) -> Callable[[UUID, dict], None]:
    """Create a bootstrap callback that captures the database session.

    This is used to wire up the auth middleware with the user service.

    Returns:
        A callback taking (user_id, claims).
    """

    def callback(user_id: UUID, claims: dict) -> None:
        ensure_user(
            db,
            user_id,
            email=claims["email"],
            name=claims.get("name"),
            avatar_url=claims.get("picture"),
            provider=claims.get("provider"),
        )

    return callback
