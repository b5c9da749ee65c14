"""Fixed classification of known feature keys."""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

FEATURE_DISPLAY: Dict[str, str] = {
    "chat_panel_agent_mode": "Agent Mode",
    "chat_panel_ask_mode": "Ask Mode",
    "chat_panel_edit_mode": "Edit Mode",
    "chat_panel_custom_mode": "Custom Mode",
    "chat_inline": "Inline Chat",
    "code_completion": "Code Completion",
    "agent_edit": "Agent Edit",
    "chat_panel_unknown_mode": "Unknown Mode",
}

# Autonomous or background edits.
AGENT_FEATURES: FrozenSet[str] = frozenset(
    {
        "agent_edit",
        "chat_panel_agent_mode",
        "chat_panel_custom_mode",
        "chat_panel_edit_mode",
    }
)

# Changes a person asked for in the moment.
USER_INITIATED_FEATURES: FrozenSet[str] = frozenset(
    {"code_completion", "chat_panel_ask_mode", "chat_inline"}
)

# Display order matters for stacked charts.
CHAT_MODES: Tuple[str, ...] = (
    "chat_panel_agent_mode",
    "chat_panel_ask_mode",
    "chat_panel_edit_mode",
    "chat_panel_custom_mode",
    "chat_inline",
)

CODE_COMPLETION = "code_completion"
OTHER_LABEL = "Other"


def display_name(feature: str) -> str:
    return FEATURE_DISPLAY.get(feature, feature)
