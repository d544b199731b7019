"""MCP tools for viewing, upserting and deleting pages in named notebooks."""

import logging
import threading
from functools import partial
from typing import Annotated, Any, Callable, Dict, TypeVar

import anyio
from anyio import to_thread
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from notebook_mcp.services.notebook_service import NotebookService, require_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

NotebookName = Annotated[
    str, Field(description="Name of the notebook (case-insensitive, non-empty).")
]
PageName = Annotated[str, Field(description="Page name within the notebook (non-empty).")]


class NotebookTools:
    """Async tool handlers; blocking storage work runs in worker threads."""

    def __init__(self, service: NotebookService) -> None:
        self._service = service

    async def _call(self, func: Callable[..., T], *args: Any) -> T:
        cancel = threading.Event()
        try:
            return await to_thread.run_sync(
                partial(func, *args, cancel=cancel), abandon_on_cancel=True
            )
        except anyio.get_cancelled_exc_class():
            cancel.set()
            raise

    async def create_notebook(
        self,
        notebook_name: NotebookName,
        description: Annotated[str, Field(description="Description to store for the notebook.")] = "",
    ) -> str:
        """Create a notebook or update its description."""
        require_name(notebook_name, "notebook_name")
        await self._call(self._service.describe_or_create, notebook_name, description or "")
        return f"Notebook '{notebook_name}' has been created or updated."

    async def get_notebook_page_names(self, notebook_name: NotebookName) -> Dict[str, Any]:
        """Get notebook description and page names without page text."""
        summary = await self._call(self._service.list_pages, notebook_name)
        return summary.model_dump()

    async def get_page_text(self, notebook_name: NotebookName, page: PageName) -> str:
        """Read a single page from a notebook. Missing pages read as empty text."""
        return await self._call(self._service.get_page_text, notebook_name, page)

    async def upsert_page(
        self,
        notebook_name: NotebookName,
        page: PageName,
        text: Annotated[
            str, Field(description="Text to store for the page, verbatim. May be empty.")
        ],
    ) -> str:
        """Create or update a page in a notebook."""
        await self._call(self._service.upsert_page, notebook_name, page, text)
        return f"Page '{page}' has been upserted in notebook '{notebook_name}'."

    async def remove_page(self, notebook_name: NotebookName, page: PageName) -> bool:
        """Delete a single page from a notebook. Returns true if deleted, false if not found."""
        return await self._call(self._service.delete_page, notebook_name, page)


TOOL_NAMES = (
    "create_notebook",
    "get_notebook_page_names",
    "get_page_text",
    "upsert_page",
    "remove_page",
)


def build_server(service: NotebookService, *, name: str = "notebook") -> FastMCP:
    server = FastMCP(
        name,
        instructions="Tools for viewing, upserting, and deleting pages in named notebooks.",
    )
    tools = NotebookTools(service)
    for tool_name in TOOL_NAMES:
        server.tool(name=tool_name)(getattr(tools, tool_name))
    logger.debug("Registered %d notebook tools on server '%s'", len(TOOL_NAMES), name)
    return server
