"""Conversational intake package."""

from gold_ledger.conversation.prompts import (
    COIN_OPTIONS,
    COMMAND_LABELS,
    CURRENCY_OPTIONS,
    Command,
    DIRECTION_LABELS,
    EXPORT_COMMANDS,
    ITEM_KIND_OPTIONS,
    START_COMMANDS,
    main_menu,
    parse_command,
    step_prompt,
)
from gold_ledger.conversation.session_store import SessionStore
from gold_ledger.conversation.state_machine import DialogStateMachine, Transition

__all__ = [
    "COIN_OPTIONS",
    "COMMAND_LABELS",
    "CURRENCY_OPTIONS",
    "Command",
    "DIRECTION_LABELS",
    "EXPORT_COMMANDS",
    "ITEM_KIND_OPTIONS",
    "START_COMMANDS",
    "main_menu",
    "parse_command",
    "step_prompt",
    "SessionStore",
    "DialogStateMachine",
    "Transition",
]
