from fastapi import APIRouter, Depends

from ..config import ConfigStore
from .dependencies import get_config_store

router = APIRouter(tags=["health"])


@router.get("/health")
def health(store: ConfigStore = Depends(get_config_store)):
    return {"status": "ok", "neural_enabled": store.snapshot.neural_enabled}
