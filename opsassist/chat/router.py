"""
Turn Router

Transition function of the per-turn state machine:

    AWAITING_MODEL --(no tool calls)--> DONE
    AWAITING_MODEL --(tool calls)-----> EXECUTING_TOOLS
    AWAITING_MODEL --(hop cap hit)----> LOOP_LIMIT
    EXECUTING_TOOLS ------------------> AWAITING_MODEL
"""

from __future__ import annotations

from .models import AssistantMessage, TurnState

TERMINAL_STATES = frozenset({TurnState.DONE, TurnState.LOOP_LIMIT})


def route_after_agent(message: AssistantMessage, hops: int, max_hops: int) -> TurnState:
    """Decide where the turn goes after the model answered.

    ``hops`` is the number of tool rounds already completed in this turn.
    """
    if not message.requested_calls:
        return TurnState.DONE
    if hops >= max_hops:
        return TurnState.LOOP_LIMIT
    return TurnState.EXECUTING_TOOLS


def route_after_tools() -> TurnState:
    return TurnState.AWAITING_MODEL


def is_terminal(state: TurnState) -> bool:
    return state in TERMINAL_STATES
