"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from replay_studio.services.session import StudioSession


def get_studio_session(request: Request) -> StudioSession:
    """Get the studio session created by the application lifespan."""
    return request.app.state.studio


StudioDep = Annotated[StudioSession, Depends(get_studio_session)]
