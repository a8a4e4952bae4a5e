"""
Utility functions for network capture
"""
from .session_registry import (
	SessionRegistry,
	get_session_registry,
	register_session,
	unregister_session,
	get_session,
	has_session,
	list_sessions,
	session_count,
	clear_sessions,
	set_current_session,
	get_current_session,
	clear_current_session,
)
from .singleton import singleton

__all__ = [
	"SessionRegistry",
	"get_session_registry",
	"register_session",
	"unregister_session",
	"get_session",
	"has_session",
	"list_sessions",
	"session_count",
	"clear_sessions",
	"set_current_session",
	"get_current_session",
	"clear_current_session",
	"singleton",
]
