from __future__ import annotations

from pathlib import Path

import anyio
import pytest

from notebook_mcp.errors import InvalidArgumentError
from notebook_mcp.repositories.notebook_repo import NotebookRepo
from notebook_mcp.server import TOOL_NAMES, NotebookTools, build_server
from notebook_mcp.services.notebook_service import NotebookService


def _tools(path: Path) -> NotebookTools:
    return NotebookTools(NotebookService(NotebookRepo(path)))


def test_build_server_registers_notebook_tools(tmp_path: Path) -> None:
    server = build_server(NotebookService(NotebookRepo(tmp_path)), name="nb-test")
    tools = anyio.run(server.list_tools)
    assert sorted(t.name for t in tools) == sorted(TOOL_NAMES)

    by_name = {t.name: t for t in tools}
    assert set(by_name["upsert_page"].inputSchema["properties"]) == {
        "notebook_name",
        "page",
        "text",
    }


def test_tool_flow(tmp_path: Path) -> None:
    tools = _tools(tmp_path)

    msg = anyio.run(tools.create_notebook, "Work", "stuff")
    assert msg == "Notebook 'Work' has been created or updated."

    msg = anyio.run(tools.upsert_page, "work", "todo", "héllo — 日本語")
    assert msg == "Page 'todo' has been upserted in notebook 'work'."

    assert anyio.run(tools.get_page_text, "WORK", "TODO") == "héllo — 日本語"
    assert anyio.run(tools.get_notebook_page_names, "work") == {
        "description": "stuff",
        "pages": ["todo"],
    }
    assert anyio.run(tools.remove_page, "work", "todo") is True
    assert anyio.run(tools.remove_page, "work", "todo") is False
    assert anyio.run(tools.get_page_text, "work", "todo") == ""


def test_tool_defaults_for_missing_notebook(tmp_path: Path) -> None:
    tools = _tools(tmp_path)
    assert anyio.run(tools.get_notebook_page_names, "ghost") == {"description": "", "pages": []}
    assert anyio.run(tools.get_page_text, "ghost", "p") == ""
    assert anyio.run(tools.remove_page, "ghost", "p") is False


def test_tools_reject_blank_names(tmp_path: Path) -> None:
    tools = _tools(tmp_path)
    with pytest.raises(InvalidArgumentError):
        anyio.run(tools.create_notebook, "  ", "d")
    with pytest.raises(InvalidArgumentError):
        anyio.run(tools.upsert_page, "work", "", "x")


def test_cancelled_tool_call_leaves_no_notebook(tmp_path: Path) -> None:
    repo = NotebookRepo(tmp_path)
    tools = NotebookTools(NotebookService(repo))

    async def _run() -> None:
        with repo.lock("busy"):
            async with anyio.create_task_group() as tg:
                tg.start_soon(tools.upsert_page, "busy", "p", "x")
                await anyio.sleep(0.1)
                tg.cancel_scope.cancel()
        # let the abandoned worker observe the cancel event
        await anyio.sleep(0.3)

    anyio.run(_run)
    assert not (tmp_path / "busy.json").exists()
    assert not repo.exists("busy")
