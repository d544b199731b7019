"""Page-level notebook operations built on load-modify-save cycles."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from notebook_mcp.errors import InvalidArgumentError
from notebook_mcp.repositories.notebook_repo import NotebookRepo
from notebook_mcp.schema import Notebook, NotebookSummary

logger = logging.getLogger(__name__)


def require_name(value: Any, param_name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(param_name)
    return value


class NotebookService:
    """
    Validates arguments and maps page operations onto the notebook repository.

    A missing notebook and a missing page look the same to callers: empty
    summaries, empty text and ``False`` from deletes. Each call performs one
    load and at most one save while holding the notebook's lock, so
    concurrent calls on the same notebook never lose each other's writes.
    """

    def __init__(self, repo: NotebookRepo) -> None:
        self._repo = repo

    @property
    def repo(self) -> NotebookRepo:
        return self._repo

    def describe_or_create(
        self,
        notebook_name: str,
        description: Optional[str],
        *,
        cancel: Optional[threading.Event] = None,
    ) -> Notebook:
        require_name(notebook_name, "notebook_name")
        logger.info("Creating or updating notebook '%s'", notebook_name)
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel) or Notebook.new(notebook_name)
            saved = self._repo.save(notebook.with_description(description), cancel)
        logger.info("Notebook '%s' saved with description", notebook_name)
        return saved

    def list_pages(
        self, notebook_name: str, *, cancel: Optional[threading.Event] = None
    ) -> NotebookSummary:
        require_name(notebook_name, "notebook_name")
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel)
        if notebook is None:
            logger.info("Notebook '%s' not found, returning empty summary", notebook_name)
            return NotebookSummary.empty()
        logger.info("Notebook '%s' contains %d pages", notebook_name, len(notebook.pages))
        return NotebookSummary(
            description=notebook.description or "",
            pages=[p.page for p in notebook.pages.values()],
        )

    def view_notebook(
        self, notebook_name: str, *, cancel: Optional[threading.Event] = None
    ) -> Dict[str, str]:
        require_name(notebook_name, "notebook_name")
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel)
        if notebook is None:
            return {}
        return {key: entry.text for key, entry in notebook.pages.items()}

    def get_page_text(
        self, notebook_name: str, page: str, *, cancel: Optional[threading.Event] = None
    ) -> str:
        require_name(notebook_name, "notebook_name")
        require_name(page, "page")
        logger.info("Reading page '%s' from notebook '%s'", page, notebook_name)
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel)
        if notebook is None:
            logger.info(
                "Notebook '%s' not found, returning empty text for '%s'", notebook_name, page
            )
            return ""
        entry = notebook.get_page(page)
        if entry is None:
            logger.info("Page '%s' not found in notebook '%s'", page, notebook_name)
            return ""
        return entry.text

    def page_exists(
        self, notebook_name: str, page: str, *, cancel: Optional[threading.Event] = None
    ) -> bool:
        require_name(notebook_name, "notebook_name")
        require_name(page, "page")
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel)
        return notebook is not None and notebook.get_page(page) is not None

    def upsert_page(
        self,
        notebook_name: str,
        page: str,
        text: Optional[str],
        *,
        cancel: Optional[threading.Event] = None,
    ) -> Notebook:
        require_name(notebook_name, "notebook_name")
        require_name(page, "page")
        logger.info("Writing page '%s' to notebook '%s'", page, notebook_name)
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel)
            if notebook is None:
                logger.info("Creating new notebook '%s'", notebook_name)
                notebook = Notebook.new(notebook_name)
            saved = self._repo.save(notebook.with_page(page, text or ""), cancel)
        return saved

    def delete_page(
        self, notebook_name: str, page: str, *, cancel: Optional[threading.Event] = None
    ) -> bool:
        require_name(notebook_name, "notebook_name")
        require_name(page, "page")
        logger.info("Deleting page '%s' from notebook '%s'", page, notebook_name)
        with self._repo.lock(notebook_name, cancel):
            notebook = self._repo.load(notebook_name, cancel)
            if notebook is None:
                logger.info("Notebook '%s' not found, nothing to delete", notebook_name)
                return False
            remaining = notebook.without_page(page)
            if remaining is None:
                logger.info("Page '%s' not found in notebook '%s'", page, notebook_name)
                return False
            self._repo.save(remaining, cancel)
        logger.info("Deleted page '%s' from notebook '%s'", page, notebook_name)
        return True
