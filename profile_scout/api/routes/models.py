from __future__ import annotations

from fastapi import APIRouter

from profile_scout.llm_client import available_models
from profile_scout.models.schemas import ModelInfo, ModelsResponse

router = APIRouter(prefix="/api/models", tags=["models"])


@router.get("", response_model=ModelsResponse)
async def list_models():
    """List the model providers the pipeline can be configured with."""
    return ModelsResponse(models=[ModelInfo(**m) for m in available_models()])
