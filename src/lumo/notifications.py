"""
Hook notification defaults.

Claude Code hooks may post a bare event name; these tables provide the
title and message shown when the hook does not supply its own.
"""

UNKNOWN_HOOK_EVENT = "Unknown"

DEFAULT_TITLES: dict[str, str] = {
    "Notification": "Claude Code",
    "Stop": "Task Completed",
    "SessionEnd": "Session Ended",
}

DEFAULT_MESSAGES: dict[str, str] = {
    "Notification": "Claude Code needs your attention.",
    "Stop": "Claude Code has finished the current task.",
    "SessionEnd": "The Claude Code session has ended.",
}


def default_title(hook_event: str) -> str:
    return DEFAULT_TITLES.get(hook_event, f"Claude Code — {hook_event}")


def default_message(hook_event: str) -> str:
    return DEFAULT_MESSAGES.get(hook_event, f"Hook event: {hook_event}")
