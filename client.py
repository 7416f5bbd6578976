import sys
import json
import asyncio
import logging
from pathlib import Path

from mcp_use import MCPClient

PROJECT_ROOT = Path(__file__).resolve().parent
SERVER_NAME = "process"

logger = logging.getLogger("mcp_process_client")


def _text(result) -> str:
    """First text block of a CallToolResult"""
    if result.content and hasattr(result.content[0], "text"):
        return result.content[0].text
    return str(result)


def _short(name: str, width: int = 20) -> str:
    if len(name) > width:
        return name[: width - 3] + "..."
    return name


async def main():
    LOG_DIR = PROJECT_ROOT / "logs"
    LOG_DIR.mkdir(exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_DIR / "mcp-client.log", encoding="utf-8"),
            logging.StreamHandler()
        ],
    )

    client = MCPClient.from_dict({
        "mcpServers": {
            SERVER_NAME: {
                "command": sys.executable,
                "args": [str(PROJECT_ROOT / "servers" / "process" / "server.py")],
                "cwd": str(PROJECT_ROOT),
            }
        }
    })

    await client.create_all_sessions()
    session = client.sessions[SERVER_NAME]

    try:
        tools = await session.list_tools()
        logger.info(f"🛠 Tools: {', '.join(t.name for t in tools)}")

        # 1. list_processes: top 10 by CPU
        logger.info("1. Calling list_processes")
        result = await session.call_tool("list_processes", {"limit": 10})
        listing = json.loads(_text(result))

        if listing.get("success"):
            logger.info(f"✅ {listing['total_count']} processes matched")
            if listing["limited"]:
                logger.info("   (Results limited - showing top processes by CPU usage)")
            for i, proc in enumerate(listing["processes"], start=1):
                logger.info(
                    f"   {i:2}. PID {proc['pid']:6} | {_short(proc['name']):20} | "
                    f"CPU: {proc['cpu_percent']:5.1f}% | Mem: {proc['memory_mb']:7.1f} MB"
                )
        else:
            logger.error(f"❌ Failed to list processes: {listing.get('message')}")

        # 2. kill_process against a PID that should not exist
        logger.info("2. Calling kill_process with PID 999999 (expected to fail)")
        result = await session.call_tool("kill_process", {"pid": 999999})
        outcome = json.loads(_text(result))
        if outcome.get("success"):
            logger.warning(f"⚠️  Unexpectedly killed: {outcome['message']}")
        else:
            logger.info(f"Expected error [{outcome.get('error')}]: {outcome.get('message')}")
    finally:
        await client.close_all_sessions()


if __name__ == "__main__":
    asyncio.run(main())
