"""
User registration endpoint.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from registrar.services import RegistrationRequest, RegistrationService

router = APIRouter(tags=["users"])


class CreateUserRequest(BaseModel):
    """Registration request body. Length policy lives in the service."""

    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=4096)


def get_registration_service(request: Request) -> RegistrationService:
    """Dependency returning the service wired at startup."""
    return request.app.state.registration_service


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    service: Annotated[RegistrationService, Depends(get_registration_service)],
) -> dict[str, Any]:
    """
    Register a new user.

    Argon2id is CPU and memory bound, so the pipeline runs in the thread pool
    instead of on the event loop.
    """
    await run_in_threadpool(
        service.register,
        RegistrationRequest(email=body.email, password=body.password),
    )
    return {"status": "created", "message": "User created."}
