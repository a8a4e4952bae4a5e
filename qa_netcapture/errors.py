"""
Network Capture Errors

Exception taxonomy shared by the session registry and the capture lifecycle.
"""


class NetworkCaptureError(Exception):
	"""Base exception for qa_netcapture."""
	pass


class InvalidKeyError(NetworkCaptureError, ValueError):
	"""Raised when a registry operation is called with an empty or missing key."""
	pass


class SessionInitError(NetworkCaptureError):
	"""Raised when a browser session, its debug channel or the network listeners cannot be set up."""
	pass


class SinkWriteError(NetworkCaptureError):
	"""Raised when captured network events cannot be written to the log sink."""
	pass
