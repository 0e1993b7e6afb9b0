"""Current user endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from researchhub.api.deps import get_db
from researchhub.auth.middleware import Viewer, get_viewer
from researchhub.responses import success_response
from researchhub.services import users as users_service

router = APIRouter()


@router.get("/me")
def get_me(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get the authenticated user's profile."""
    user = users_service.get_user(db, viewer.user_id)
    return success_response(user.model_dump(mode="json"))
