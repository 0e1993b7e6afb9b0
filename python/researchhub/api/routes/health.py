"""Liveness endpoint. Public; never touches the database."""

from fastapi import APIRouter

from researchhub.responses import success_response

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    return success_response({"status": "ok"})
