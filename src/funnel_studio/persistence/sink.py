"""Persistence collaborators for committed step documents."""

import json
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Any

import requests

from ..errors import PersistenceError
from ..models import Funnel, Step

logger = logging.getLogger(__name__)


class StepSink(ABC):
    """Receives the fully materialized step document on every committed edit."""

    @abstractmethod
    def save_step(self, funnel_id: str, payload: Dict[str, Any]) -> None:
        """Store the document durably; raise PersistenceError on failure."""

    def delete_step(self, funnel_id: str, step_id: str) -> None:
        """Remove a step's document. Optional for sinks that only upsert."""


class RestStepSink(StepSink):
    """Upserts step documents over a JSON REST endpoint, with retries."""

    def __init__(self, base_url: str, api_key: Optional[str] = None,
                 timeout: int = 30, max_retries: int = 3, retry_delay: float = 1.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.headers = {"Content-Type": "application/json", "User-Agent": "Funnel-Studio/1.0"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    def _step_url(self, funnel_id: str, step_id: str) -> str:
        return f"{self.base_url}/funnels/{funnel_id}/steps/{step_id}"

    def save_step(self, funnel_id: str, payload: Dict[str, Any]) -> None:
        url = self._step_url(funnel_id, payload['id'])
        last_error = None
        for attempt in range(self.max_retries):
            try:
                response = requests.put(url, json=payload, headers=self.headers, timeout=self.timeout)
                response.raise_for_status()
                logger.debug(f"Saved step {payload['id']} (status: {response.status_code})")
                return
            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Step save failed: {payload['id']} (attempt {attempt + 1}): {e}")
            if attempt < self.max_retries - 1:
                time.sleep(self.retry_delay * (2 ** attempt))

        raise PersistenceError(f"Could not save step {payload['id']}: {last_error}")

    def delete_step(self, funnel_id: str, step_id: str) -> None:
        try:
            response = requests.delete(self._step_url(funnel_id, step_id),
                                       headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise PersistenceError(f"Could not delete step {step_id}: {e}") from e


class JsonFunnelStore(StepSink):
    """Funnels as JSON files under a storage directory.

    Every read-modify-write of a funnel file runs under one lock, and files
    are replaced atomically so readers never see a partial document.
    """

    def __init__(self, storage_path: str = "data/funnels"):
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _funnel_file(self, funnel_id: str) -> Path:
        return self.storage_path / f"{funnel_id}.json"

    def save(self, funnel: Funnel):
        """Write a whole funnel."""
        path = self._funnel_file(funnel.id)
        tmp_path = path.with_name(f"{path.name}.tmp")
        with self._lock:
            try:
                with open(tmp_path, 'w') as f:
                    json.dump(funnel.to_dict(), f, indent=2, default=str)
                os.replace(tmp_path, path)
            except OSError as e:
                raise PersistenceError(f"Could not write funnel {funnel.id}: {e}") from e

    def load(self, funnel_id: str) -> Optional[Funnel]:
        path = self._funnel_file(funnel_id)
        with self._lock:
            if not path.exists():
                return None
            try:
                with open(path, 'r') as f:
                    return Funnel.from_dict(json.load(f))
            except (OSError, ValueError, KeyError) as e:
                raise PersistenceError(f"Could not read funnel {funnel_id}: {e}") from e

    def list_funnels(self) -> List[str]:
        return sorted(p.stem for p in self.storage_path.glob("*.json"))

    def save_step(self, funnel_id: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            funnel = self.load(funnel_id)
            if funnel is None:
                raise PersistenceError(f"Unknown funnel: {funnel_id}")
            step = Step.from_dict(payload)
            if step.id not in funnel.steps:
                funnel.step_ids.append(step.id)
            funnel.steps[step.id] = step
            self.save(funnel)

    def delete_step(self, funnel_id: str, step_id: str) -> None:
        with self._lock:
            funnel = self.load(funnel_id)
            if funnel is None or step_id not in funnel.steps:
                return
            del funnel.steps[step_id]
            funnel.step_ids = [sid for sid in funnel.step_ids if sid != step_id]
            self.save(funnel)
