"""
Configuration

This module owns the semantic search configuration in two layers:

1. ``Settings`` reads raw values from the environment (prefix
   ``SEMANTIC_SEARCH_``) or a ``.env`` file via pydantic-settings. Numeric
   knobs are kept as strings here so that a malformed value never prevents
   the process from starting.

2. ``ConfigSnapshot`` is the typed, immutable view used on the request path.
   Malformed numbers become ``None`` (absent) and are logged.

``ConfigStore`` holds the current snapshot. A reload swaps the reference in a
single assignment; readers never lock and may briefly observe the previous
snapshot while a reload is in flight.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PARAM_EF_CONSTRUCTION,
    DEFAULT_PARAM_M,
    DEFAULT_SPACE_TYPE,
)

logger = logging.getLogger("semantic.config")


class Settings(BaseSettings):
    # Neural query activation
    model_id: Optional[str] = None
    vector_field: Optional[str] = None
    nested_field: Optional[str] = None
    chunk_field: Optional[str] = None
    chunk_size: Optional[str] = None

    # knn_vector mapping
    dimension: Optional[str] = None
    engine: Optional[str] = None
    method: Optional[str] = None
    space_type: Optional[str] = None
    param_m: Optional[str] = None
    param_ef_construction: Optional[str] = None
    param_ef_search: Optional[str] = None

    # Result floors
    min_score: Optional[str] = None
    min_content_length: Optional[str] = None

    # Ingest pipeline injected as the index default_pipeline
    pipeline: Optional[str] = None

    # Search engine / ML plugin endpoints
    engine_url: str = "http://localhost:9200"
    ml_path: str = "/_plugins/_ml"
    index_name: str = "fess"
    http_timeout: float = 30.0

    # Model readiness polling
    model_poll_interval: float = 1.0
    model_poll_max_attempts: int = 60

    # Fields known to the lexical parser
    search_fields: str = (
        "title,content,url,host,site,filetype,content_length,"
        "label,lang,last_modified,timestamp"
    )
    response_fields: str = (
        "title,url,content_description,content_length,last_modified,host,filetype"
    )

    # Optional caller identity
    jwt_secret: Optional[str] = None
    jwt_algo: str = "HS256"

    # Admin endpoints (reload, template preview); disabled when unset
    admin_api_key: Optional[SecretStr] = None

    model_config = SettingsConfigDict(
        env_prefix="SEMANTIC_SEARCH_",
        env_file=".env",
        extra="ignore",
        protected_namespaces=(),
    )


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings used for wiring (endpoints, timeouts, secrets).

    The request path reads ConfigStore.snapshot instead, which follows reloads.
    """
    return Settings()


class ConfigSnapshot(BaseModel):
    """
    Typed, immutable view of the semantic search settings.
    """

    model_id: Optional[str] = None
    vector_field: Optional[str] = None
    nested_field: Optional[str] = None
    chunk_field: Optional[str] = None
    chunk_size: Optional[int] = DEFAULT_CHUNK_SIZE

    dimension: Optional[int] = None
    engine: Optional[str] = None
    method: Optional[str] = None
    space_type: str = DEFAULT_SPACE_TYPE
    param_m: int = DEFAULT_PARAM_M
    param_ef_construction: int = DEFAULT_PARAM_EF_CONSTRUCTION
    param_ef_search: Optional[int] = None

    min_score: Optional[float] = None
    min_content_length: Optional[int] = None
    pipeline: Optional[str] = None

    search_fields: List[str] = []
    response_fields: List[str] = []

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    @property
    def neural_enabled(self) -> bool:
        return bool(self.model_id and self.vector_field)

    @property
    def mapping_enabled(self) -> bool:
        return bool(
            self.dimension is not None
            and self.vector_field
            and self.method
            and self.engine
        )


# ---------------------------------------------------------------------
# Lenient parsing
# ---------------------------------------------------------------------

def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_int(name: str, raw: Optional[str]) -> Optional[int]:
    raw = _blank_to_none(raw)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s: %r, ignored.", name, raw)
        return None


def _parse_float(name: str, raw: Optional[str]) -> Optional[float]:
    raw = _blank_to_none(raw)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s: %r, ignored.", name, raw)
        return None


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_snapshot(settings: Optional[Settings] = None) -> ConfigSnapshot:
    """
    Parse settings into a ConfigSnapshot.

    Parameters
    ----------
    settings : Optional[Settings]
        Raw settings. A fresh ``Settings()`` is read when omitted, which picks
        up the current environment.

    Returns
    -------
    ConfigSnapshot
    """
    if settings is None:
        settings = Settings()

    chunk_size = _parse_int("chunk_size", settings.chunk_size)
    if chunk_size is not None and chunk_size < 1:
        logger.warning("Invalid chunk_size: %s, ignored.", chunk_size)
        chunk_size = None

    param_m = _parse_int("param_m", settings.param_m)
    param_ef_construction = _parse_int(
        "param_ef_construction", settings.param_ef_construction
    )

    return ConfigSnapshot(
        model_id=_blank_to_none(settings.model_id),
        vector_field=_blank_to_none(settings.vector_field),
        nested_field=_blank_to_none(settings.nested_field),
        chunk_field=_blank_to_none(settings.chunk_field),
        chunk_size=chunk_size,
        dimension=_parse_int("dimension", settings.dimension),
        engine=_blank_to_none(settings.engine),
        method=_blank_to_none(settings.method),
        space_type=_blank_to_none(settings.space_type) or DEFAULT_SPACE_TYPE,
        param_m=param_m if param_m is not None else DEFAULT_PARAM_M,
        param_ef_construction=(
            param_ef_construction
            if param_ef_construction is not None
            else DEFAULT_PARAM_EF_CONSTRUCTION
        ),
        param_ef_search=_parse_int("param_ef_search", settings.param_ef_search),
        min_score=_parse_float("min_score", settings.min_score),
        min_content_length=_parse_int(
            "min_content_length", settings.min_content_length
        ),
        pipeline=_blank_to_none(settings.pipeline),
        search_fields=_split_csv(settings.search_fields),
        response_fields=_split_csv(settings.response_fields),
    )


# ---------------------------------------------------------------------
# Snapshot holder
# ---------------------------------------------------------------------

ModelDeployer = Callable[[str], bool]


class ConfigStore:
    """
    Holder of the current ConfigSnapshot.

    A ``deployer`` callable (normally ``ModelLifecycle.ensure_deployed``) is
    invoked with the configured model id on load and on every reload.
    """

    def __init__(
        self,
        settings_factory: Callable[[], Settings] = Settings,
        deployer: Optional[ModelDeployer] = None,
    ) -> None:
        self._settings_factory = settings_factory
        self._deployer = deployer
        self._snapshot = ConfigSnapshot()

    @property
    def snapshot(self) -> ConfigSnapshot:
        return self._snapshot

    def set_deployer(self, deployer: Optional[ModelDeployer]) -> None:
        self._deployer = deployer

    def load(self) -> ConfigSnapshot:
        """
        Read settings, install the snapshot and make sure the model is deployed.
        """
        self._snapshot = load_snapshot(self._settings_factory())
        logger.debug("Loaded semantic search config: %s", self._snapshot)
        self._deploy_model()
        return self._snapshot

    def reload(self) -> ConfigSnapshot:
        """
        Replace the snapshot after a configuration change.

        Deployment errors are logged and never propagated.
        """
        snapshot = load_snapshot(self._settings_factory())
        self._snapshot = snapshot
        logger.info("Reloaded semantic search config.")
        self._deploy_model()
        return snapshot

    def _deploy_model(self) -> None:
        model_id = self._snapshot.model_id
        if not model_id or self._deployer is None:
            return
        try:
            if not self._deployer(model_id):
                logger.warning("Model %s is not deployed.", model_id)
        except Exception:
            logger.exception("Failed to check deployment of model %s", model_id)
