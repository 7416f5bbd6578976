"""
Tool Disabling Helper for MCP Servers
=====================================

Allows disabling specific tools via environment variable.

Setup in .env:
    # Disable individual tools
    DISABLED_TOOLS=kill_process

    # Or disable all tools from a category
    DISABLED_TOOLS=process:*

    # Or one tool within a category
    DISABLED_TOOLS=process:kill_process

Usage in server:
    from tools.tool_control import check_tool_enabled

    @check_tool_enabled(category="process")
    async def kill_process(pid: int) -> str:
        ...

The variable is read the first time a tool is checked, so load_dotenv() must
run before that. Call reload_disabled_tools() after changing it.
"""

import os
import json
import inspect
import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)

ALL_TOOLS = "*"


@dataclass
class DisabledTools:
    """Parsed form of DISABLED_TOOLS"""

    tools: Set[str] = field(default_factory=set)
    categories: Dict[str, Set[str]] = field(default_factory=dict)
    raw: str = ""

    def blocks(self, tool_name: str, category: Optional[str] = None) -> bool:
        if tool_name in self.tools:
            return True
        if category and category in self.categories:
            rules = self.categories[category]
            return ALL_TOOLS in rules or tool_name in rules
        return False


def parse_disabled_tools(raw: str) -> DisabledTools:
    """
    Parse a DISABLED_TOOLS value.

    Comma separated; each item is a tool name, "category:tool" or
    "category:*". Blank items are ignored.
    """
    disabled = DisabledTools(raw=raw or "")

    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        if ":" in item:
            category, tool = (part.strip() for part in item.split(":", 1))
            disabled.categories.setdefault(category, set()).add(tool)
        else:
            disabled.tools.add(item)

    return disabled


_disabled: Optional[DisabledTools] = None


def reload_disabled_tools(raw: Optional[str] = None) -> DisabledTools:
    """Re-read DISABLED_TOOLS (or use raw) and log what is switched off."""
    global _disabled
    if raw is None:
        raw = os.getenv("DISABLED_TOOLS", "")
    _disabled = parse_disabled_tools(raw)

    if _disabled.tools or _disabled.categories:
        logger.info("🚫 Tool disabling active:")
        if _disabled.tools:
            logger.info(f"   Disabled tools: {', '.join(sorted(_disabled.tools))}")
        for category, rules in _disabled.categories.items():
            if ALL_TOOLS in rules:
                logger.info(f"   Disabled category: {category}:* (all tools)")
            else:
                logger.info(f"   Disabled {category}: {', '.join(sorted(rules))}")

    return _disabled


def get_disabled_tools() -> DisabledTools:
    if _disabled is None:
        return reload_disabled_tools()
    return _disabled


def is_tool_enabled(tool_name: str, category: Optional[str] = None) -> bool:
    """
    Check if a tool is enabled.

    Args:
        tool_name: Name of the tool to check
        category: Optional category (e.g., "process")

    Returns:
        True if tool is enabled, False if disabled
    """
    return not get_disabled_tools().blocks(tool_name, category)


def disabled_tool_response(tool_name: str, reason: Optional[str] = None) -> str:
    """JSON payload returned in place of a disabled tool's result."""
    default_reason = f"Tool '{tool_name}' is currently disabled via DISABLED_TOOLS configuration"

    return json.dumps({
        "error": reason or default_reason,
        "tool": tool_name,
        "disabled": True,
        "message": "This tool has been disabled by the administrator. Check DISABLED_TOOLS environment variable."
    }, indent=2)


def check_tool_enabled(func: Callable = None, *, category: Optional[str] = None):
    """
    Decorator that short-circuits a tool when DISABLED_TOOLS switches it off.

    The wrapped function's __name__ is used as the tool name. Works on both
    plain and async functions, with or without arguments:

        @check_tool_enabled
        @check_tool_enabled(category="process")
    """

    def decorator(f):
        tool_name = f.__name__

        if inspect.iscoroutinefunction(f):
            @wraps(f)
            async def async_wrapper(*args, **kwargs):
                if not is_tool_enabled(tool_name, category):
                    logger.warning(f"🚫 Tool '{tool_name}' called but is disabled")
                    return disabled_tool_response(tool_name)
                return await f(*args, **kwargs)

            return async_wrapper

        @wraps(f)
        def wrapper(*args, **kwargs):
            if not is_tool_enabled(tool_name, category):
                logger.warning(f"🚫 Tool '{tool_name}' called but is disabled")
                return disabled_tool_response(tool_name)
            return f(*args, **kwargs)

        return wrapper

    if func is None:
        return decorator
    return decorator(func)


__all__ = [
    'DisabledTools',
    'parse_disabled_tools',
    'reload_disabled_tools',
    'get_disabled_tools',
    'is_tool_enabled',
    'disabled_tool_response',
    'check_tool_enabled',
]
