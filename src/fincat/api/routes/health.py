from typing import Annotated

from fastapi import APIRouter, Depends

from fincat.api.dependencies import get_service
from fincat.manager import CategorizerService

router = APIRouter()


@router.get("/health")
async def health(
    service: Annotated[CategorizerService, Depends(get_service)],
) -> dict[str, int | str]:
    return {"status": "ok", "categories": len(service.get_taxonomy())}
