"""
Chat Logging Utilities

Shared logging helpers with per-module feature control.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# module name -> feature name -> enabled
_module_features: dict[str, dict[str, bool]] = {}


def set_module_features(module: str, features: dict[str, bool]) -> None:
    """Register the enabled logging features for a module."""
    _module_features[module] = dict(features)


def should_log_feature(module: str, feature: str) -> bool:
    """Check if a specific logging feature should be enabled."""
    return _module_features.get(module, {}).get(feature, False)


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def log_llm_reply(
    reply: dict[str, Any], context: str, chat_conf: dict[str, Any]
) -> None:
    """
    LLM reply logging with feature control and configuration-based truncation.

    Args:
        reply: LLM response dump containing message and model
        context: Descriptive context for the log entry
        chat_conf: Chat service configuration containing logging settings
    """
    if not should_log_feature("chat", "llm_replies"):
        return

    message = reply.get("message", {})
    content = message.get("content") or ""
    tool_calls = message.get("tool_calls") or []

    truncate_length = chat_conf.get("logging", {}).get("llm_reply", 500)
    content = _truncate(content, truncate_length)

    log_parts = [f"LLM Reply ({context}):"]

    if content:
        log_parts.append(f"Content: {content}")

    if tool_calls:
        log_parts.append(f"Tool calls: {len(tool_calls)}")
        for i, call in enumerate(tool_calls):
            name = call.get("function", {}).get("name", "unknown")
            log_parts.append(f"  [{i}] {name}")

    log_parts.append(f"Model: {reply.get('model', 'unknown')}")

    logger.info(" | ".join(log_parts))


def log_tool_execution_start(
    tool_name: str, call_index: int = 0, total_calls: int = 1
) -> None:
    """
    Log the start of tool execution with consistent formatting.

    Args:
        tool_name: Name of the tool being executed
        call_index: Index of current call (0-based, used for batch execution)
        total_calls: Total number of calls in batch
    """
    if not should_log_feature("chat", "tool_execution"):
        return
    if total_calls > 1:
        logger.info(
            "→ Tool[%s]: executing tool call %d/%d",
            tool_name,
            call_index + 1,
            total_calls,
        )
    else:
        logger.info("→ Tool[%s]: executing tool", tool_name)


def log_tool_execution_success(tool_name: str, content_length: int) -> None:
    """Log successful tool execution with content length."""
    if not should_log_feature("chat", "tool_execution"):
        return
    logger.info("← Tool[%s]: success, content length: %d", tool_name, content_length)


def log_tool_execution_error(tool_name: str, error_msg: str) -> None:
    """Log tool execution error with consistent formatting."""
    logger.error("← Tool[%s]: failed with error: %s", tool_name, error_msg)


def log_tool_args_error(tool_name: str, error: Exception) -> None:
    """Log malformed tool arguments."""
    logger.error("Malformed JSON arguments for %s: %s", tool_name, error)


def log_tool_arguments(
    tool_name: str, arguments: dict[str, Any], context: str, truncate_length: int = 500
) -> None:
    """
    Log tool arguments being sent to a handler.

    Args:
        tool_name: Name of the tool being called
        arguments: Arguments dictionary being sent to the tool
        context: Descriptive context for the log entry
        truncate_length: Maximum length for argument logging
    """
    if not should_log_feature("chat", "tool_arguments"):
        logger.debug(f"Tool arguments logging disabled for {tool_name}")
        return

    args_str = _truncate(str(arguments), truncate_length)
    logger.info(f"→ Tool[{tool_name}]: arguments ({context}): {args_str}")
