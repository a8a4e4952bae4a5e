"""Capture module - per-test network capture lifecycle"""
from .buffer import EventBuffer
from .lifecycle import NO_ACTIVITY_MARKER, CaptureLifecycle, CaptureState
from .sinks import ConsoleLogSink, FileLogSink, LogSink, create_sink

__all__ = [
	'EventBuffer',
	'NO_ACTIVITY_MARKER',
	'CaptureLifecycle',
	'CaptureState',
	'ConsoleLogSink',
	'FileLogSink',
	'LogSink',
	'create_sink',
]
