"""File storage for notebooks: one JSON file and one lock per notebook."""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from pydantic import ValidationError

from notebook_mcp.errors import NotebookStorageError, OperationCancelledError
from notebook_mcp.schema import Notebook
from notebook_mcp.utils import file_key

logger = logging.getLogger(__name__)

_LOCK_POLL_SECONDS = 0.05


def _check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError("Notebook operation cancelled.")


def dump_notebook(notebook: Notebook) -> str:
    payload = notebook.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


class NotebookRepo:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def notebook_path(self, notebook_name: str) -> Path:
        return self._root / f"{file_key(notebook_name)}.json"

    def _lock_for(self, notebook_name: str) -> threading.RLock:
        key = file_key(notebook_name)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock(
        self, notebook_name: str, cancel: Optional[threading.Event] = None
    ) -> Iterator[None]:
        """Hold the notebook's lock, e.g. around a load-modify-save cycle."""
        lock = self._lock_for(notebook_name)
        _check_cancel(cancel)
        if cancel is None:
            lock.acquire()
        else:
            while not lock.acquire(timeout=_LOCK_POLL_SECONDS):
                _check_cancel(cancel)
        try:
            yield
        finally:
            lock.release()

    def exists(self, notebook_name: str) -> bool:
        return self.notebook_path(notebook_name).exists()

    def load(
        self, notebook_name: str, cancel: Optional[threading.Event] = None
    ) -> Optional[Notebook]:
        path = self.notebook_path(notebook_name)
        with self.lock(notebook_name, cancel):
            _check_cancel(cancel)
            try:
                if not path.exists():
                    logger.debug("Notebook file does not exist: %s", path)
                    return None
                notebook = Notebook.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ValidationError) as exc:
                logger.error(
                    "Failed to load notebook '%s' from %s", notebook_name, path, exc_info=True
                )
                raise NotebookStorageError(
                    f"Notebook file {path} could not be read: {exc}", path=path
                ) from exc
            logger.debug(
                "Loaded notebook '%s' with %d pages from %s",
                notebook_name,
                len(notebook.pages),
                path,
            )
            return notebook

    def save(
        self, notebook: Notebook, cancel: Optional[threading.Event] = None
    ) -> Notebook:
        """Write ``notebook`` with a fresh modification time and return what was written."""
        path = self.notebook_path(notebook.name)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with self.lock(notebook.name, cancel):
            to_save = notebook.touched()
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with tmp.open("w", encoding="utf-8") as f:
                    f.write(dump_notebook(to_save))
                    f.flush()
                    os.fsync(f.fileno())
                _check_cancel(cancel)
                tmp.replace(path)
            except OperationCancelledError:
                tmp.unlink(missing_ok=True)
                raise
            except OSError as exc:
                tmp.unlink(missing_ok=True)
                logger.error(
                    "Failed to save notebook '%s' to %s", notebook.name, path, exc_info=True
                )
                raise NotebookStorageError(
                    f"Notebook file {path} could not be written: {exc}", path=path
                ) from exc
            logger.debug(
                "Saved notebook '%s' with %d pages to %s",
                notebook.name,
                len(to_save.pages),
                path,
            )
            return to_save
