"""
Chat Engine Module

Agent/tool loop for the operations assistants.
"""

from .agent_step import AgentStep
from .conversation_controller import ConversationController
from .tool_executor import ToolExecutor

__all__ = ["AgentStep", "ConversationController", "ToolExecutor"]
