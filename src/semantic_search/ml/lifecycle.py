"""
Model Lifecycle

Makes sure the embedding model referenced by ``model_id`` is deployed before
neural queries are sent to the search engine.

State handling
--------------
1. ``GET`` the model and read ``model_state``.
2. If it is not deployed, request a load. The response may carry a
   ``task_id``.
3. Poll the task at a fixed interval for a bounded number of attempts. The
   first observed state other than ``CREATED`` / ``RUNNING`` ends the wait
   successfully; running out of attempts is a failure.

Failures are logged and reported as ``False``, never raised. The next
configuration reload retries.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Any, Callable, Dict, Optional

from ..config import get_settings
from .client import ModelServiceClient

logger = logging.getLogger("semantic.ml")


class ModelStatus(str, enum.Enum):
    UNKNOWN = "UNKNOWN"
    LOAD_FAILED = "LOAD_FAILED"
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    DEPLOYED = "DEPLOYED"
    COMPLETED = "COMPLETED"
    OTHER = "OTHER"

    @classmethod
    def from_state(cls, state: Optional[Any]) -> "ModelStatus":
        if not state:
            return cls.UNKNOWN
        state = str(state).upper()
        # Older ML plugin releases report LOADED instead of DEPLOYED.
        if state == "LOADED":
            return cls.DEPLOYED
        if state == "DEPLOY_FAILED":
            return cls.LOAD_FAILED
        try:
            return cls(state)
        except ValueError:
            return cls.OTHER


_PENDING_TASK_STATES = frozenset({ModelStatus.CREATED, ModelStatus.RUNNING})


class ModelLifecycle:
    """
    Orchestrates model deployment through a ModelServiceClient.
    """

    def __init__(
        self,
        client: Optional[ModelServiceClient] = None,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Parameters
        ----------
        client : Optional[ModelServiceClient]
            HTTP collaborator. A default client is created when omitted.

        poll_interval : Optional[float]
            Seconds between task polls. Defaults to settings.model_poll_interval.

        max_attempts : Optional[int]
            Maximum number of task polls. Defaults to
            settings.model_poll_max_attempts.

        sleep : Callable[[float], None]
            Sleep function, replaceable in tests.
        """
        settings = get_settings()
        self.client = client or ModelServiceClient()
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.model_poll_interval
        )
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.model_poll_max_attempts
        )
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_model(self, model_id: str) -> Dict[str, Any]:
        model = self.client.get_model(model_id)
        logger.debug("model: %s", model)
        return model

    def status(self, model_id: str) -> ModelStatus:
        return ModelStatus.from_state(self.get_model(model_id).get("model_state"))

    def ensure_deployed(self, model_id: Optional[str]) -> bool:
        """
        Load the model unless it is already deployed.

        Returns
        -------
        bool
            True if the model is deployed or was loaded successfully.
        """
        if not model_id:
            return False

        current = self.status(model_id)
        if current == ModelStatus.DEPLOYED:
            logger.debug("Model %s is already deployed.", model_id)
            return True

        logger.info("Model %s is %s, loading it.", model_id, current.value)
        if self.load_model(model_id):
            logger.info("Loaded model: %s", model_id)
            return True

        logger.warning("Failed to load model: %s", model_id)
        return False

    def load_model(self, model_id: str) -> bool:
        """
        Request a model load and wait for its task to leave the pending states.
        """
        content = self.client.load_model(model_id)
        logger.debug("loading model:%s: %s", model_id, content)

        task_id = content.get("task_id")
        if not isinstance(task_id, str) or not task_id:
            return False

        for attempt in range(self.max_attempts):
            self._sleep(self.poll_interval)
            task = self.client.get_task(task_id)
            logger.debug("task(%d): %s", attempt + 1, task)
            state = task.get("state")
            if not state:
                continue
            if ModelStatus.from_state(state) not in _PENDING_TASK_STATES:
                return True

        logger.warning(
            "Model %s did not finish loading after %d attempts (task %s).",
            model_id,
            self.max_attempts,
            task_id,
        )
        return False
