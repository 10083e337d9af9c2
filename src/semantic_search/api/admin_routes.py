"""
Admin Routes

- ``POST /admin/reload``: re-read configuration and re-check model deployment.
- ``POST /admin/template``: preview the index settings and mapping after the
  semantic search rewrite rules.

Both endpoints require the admin API key. Reload performs blocking model
polling, so it runs on the worker threadpool and never on the search path.
"""

import json

from fastapi import APIRouter, Depends

from .models import ReloadResponse, TemplateRequest, TemplateResponse
from .dependencies import get_config_store, get_index_template, get_model_lifecycle
from ..auth.security import verify_admin
from ..config import ConfigStore
from ..engine.templates import IndexTemplate
from ..ml.lifecycle import ModelLifecycle, ModelStatus

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(verify_admin)])


@router.post("/reload", response_model=ReloadResponse)
def reload_config(
    store: ConfigStore = Depends(get_config_store),
    lifecycle: ModelLifecycle = Depends(get_model_lifecycle),
) -> ReloadResponse:
    snapshot = store.reload()
    deployed = False
    if snapshot.model_id:
        deployed = lifecycle.status(snapshot.model_id) == ModelStatus.DEPLOYED
    return ReloadResponse(
        model_id=snapshot.model_id,
        vector_field=snapshot.vector_field,
        nested_field=snapshot.nested_field,
        neural_enabled=snapshot.neural_enabled,
        model_deployed=deployed,
    )


@router.post("/template", response_model=TemplateResponse)
def preview_template(
    req: TemplateRequest,
    template: IndexTemplate = Depends(get_index_template),
) -> TemplateResponse:
    settings_json, mapping_json = template.materialize(
        json.dumps(req.settings),
        json.dumps(req.mapping),
    )
    return TemplateResponse(
        settings=json.loads(settings_json),
        mapping=json.loads(mapping_json),
    )
