"""Protected greeting endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from src.features.auth.middleware import Principal, get_current_principal

router = APIRouter(tags=["Hello"])


@router.get("/hello", response_class=PlainTextResponse)
async def hello(principal: Principal = Depends(get_current_principal)):
    """Greet the authenticated user."""
    return f"Hello, {principal.username}!"
