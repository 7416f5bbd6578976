"""
Process Tools MCP Server
Runs over stdio transport (set PROCESS_SERVER_TRANSPORT for sse / streamable-http)
"""
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv
load_dotenv(PROJECT_ROOT / ".env", override=True)

import os
import json
import logging
from dataclasses import dataclass
from typing import Annotated, Callable, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.prompts import base
from mcp.types import ToolAnnotations
from pydantic import Field

from tools.tool_control import check_tool_enabled
from tools.process import killing, listing, prompts
from tools.process.blocking import shutdown_executor
from tools.process.errors import InternalToolError, ProcessToolError
from tools.process.settings import ProcessToolSettings
from tools.process.snapshot import MAX_PID

TRANSPORTS = ("stdio", "sse", "streamable-http")

logger = logging.getLogger("mcp_process_tools_server")

SETTINGS = ProcessToolSettings.from_env()

mcp = FastMCP("process-tools-server")


def configure_logging(log_dir: Optional[Path] = None) -> Path:
    """Send logs to <log_dir>/mcp-server.log and stderr. Returns the log file path."""
    log_dir = Path(log_dir or os.getenv("PROCESS_SERVER_LOG_DIR") or PROJECT_ROOT / "logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "mcp-server.log"
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers (in case something already configured it)
    root_logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # stderr only: stdout carries the stdio transport
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger("mcp").setLevel(logging.DEBUG)

    logger.info(f"🚀 Server logging initialized - writing to {log_file}")
    return log_file


def _error_response(tool_name: str, error: ProcessToolError) -> str:
    if isinstance(error, InternalToolError):
        logger.error(f"❌ [server] {tool_name} failed: {error.message}")
    else:
        logger.info(f"🛠 [server] {tool_name} returned {error.kind}: {error.message}")
    return json.dumps(error.to_dict(), indent=2)


@check_tool_enabled(category="process")
async def list_processes(
    filter: Annotated[
        Optional[str],
        Field(description="Case-insensitive substring to match against process names"),
    ] = None,
    limit: Annotated[
        int,
        Field(ge=0, description="Maximum number of processes to return (0 = no limit)"),
    ] = 0,
) -> str:
    """
    List running processes sorted by CPU usage (highest first).

    Args:
        filter (str, optional): Only include processes whose name contains this text
        limit (int, optional): Maximum number of processes to return (default: 0, all)

    Returns:
        JSON string with:
        - success: true
        - count: Number of processes returned
        - total_count: Number of matches before the limit was applied
        - snapshot_count: Number of processes in the snapshot before filtering
        - limited: true if the limit cut the list short
        - processes: [{pid, name, cpu_percent, memory_mb}]
    """
    logger.info(f"🛠 [server] list_processes called with filter: {filter}, limit: {limit}")
    try:
        result = await listing.list_processes(filter=filter, limit=limit, settings=SETTINGS)
    except ProcessToolError as e:
        return _error_response("list_processes", e)
    return json.dumps(result.to_dict(), indent=2)


@check_tool_enabled(category="process")
async def kill_process(
    pid: Annotated[int, Field(ge=0, le=MAX_PID, description="Process ID to terminate")],
) -> str:
    """
    Forcefully terminate a process by its process ID (PID).

    Args:
        pid (int, required): The process ID to terminate

    Returns:
        JSON string with:
        - success: Boolean indicating if termination succeeded
        - pid: The process ID that was terminated
        - process_name: Name of the process when it was found
        - message: Confirmation message
        On failure: {success: false, error: <kind>, pid, message}
    """
    logger.info(f"🛠 [server] kill_process called with pid: {pid}")
    try:
        result = await killing.kill_process(pid)
    except ProcessToolError as e:
        return _error_response("kill_process", e)
    return json.dumps(result.to_dict(), indent=2)


@dataclass(frozen=True)
class ToolDefinition:
    """A tool handler plus the traits advertised to MCP clients."""

    name: str
    title: str
    description: str
    handler: Callable
    read_only: bool
    destructive: bool
    idempotent: bool

    @property
    def annotations(self) -> ToolAnnotations:
        return ToolAnnotations(
            title=self.title,
            readOnlyHint=self.read_only,
            destructiveHint=self.destructive,
            idempotentHint=self.idempotent,
            openWorldHint=False,
        )


TOOL_DEFINITIONS: List[ToolDefinition] = [
    ToolDefinition(
        name="list_processes",
        title="List processes",
        description=(
            "List all running processes with PID, command name, CPU usage, and memory usage. "
            "Supports filtering by process name and limiting results. Processes are sorted "
            "by CPU usage, highest first."
        ),
        handler=list_processes,
        read_only=True,
        destructive=False,
        idempotent=True,
    ),
    ToolDefinition(
        name="kill_process",
        title="Kill process",
        description=(
            "Terminate a running process by its PID. Sends SIGKILL to forcefully stop the "
            "process. Use with caution as this does not allow graceful shutdown. Returns "
            "success if the process was terminated, an error if it was not found or "
            "permission was denied."
        ),
        handler=kill_process,
        read_only=False,
        destructive=True,
        idempotent=False,
    ),
]


def register_tools(server: FastMCP, definitions: List[ToolDefinition] = TOOL_DEFINITIONS) -> None:
    for definition in definitions:
        server.add_tool(
            definition.handler,
            name=definition.name,
            title=definition.title,
            description=definition.description,
            annotations=definition.annotations,
        )


register_tools(mcp)


@mcp.prompt(name="list_processes_usage", description="How to use the list_processes tool")
def list_processes_usage() -> list[base.Message]:
    return [
        base.UserMessage(prompts.LIST_PROCESSES_QUESTION),
        base.AssistantMessage(prompts.LIST_PROCESSES_ANSWER),
    ]


@mcp.prompt(name="kill_process_usage", description="How to use the kill_process tool safely")
def kill_process_usage() -> list[base.Message]:
    return [
        base.UserMessage(prompts.KILL_PROCESS_QUESTION),
        base.AssistantMessage(prompts.KILL_PROCESS_ANSWER),
    ]


def main():
    configure_logging()

    transport = os.getenv("PROCESS_SERVER_TRANSPORT", "stdio").strip() or "stdio"
    if transport not in TRANSPORTS:
        logger.error(f"❌ Unknown PROCESS_SERVER_TRANSPORT '{transport}', expected one of {', '.join(TRANSPORTS)}")
        sys.exit(2)

    logger.info(f"🛠  {len(TOOL_DEFINITIONS)} tools: {', '.join(d.name for d in TOOL_DEFINITIONS)}")
    try:
        mcp.run(transport=transport)
    finally:
        shutdown_executor(wait=False)


if __name__ == "__main__":
    main()
