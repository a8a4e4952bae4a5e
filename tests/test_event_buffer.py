import threading

import pytest

from qa_netcapture.capture.buffer import EventBuffer
from qa_netcapture.views import RequestEvent, ResponseEvent


def test_drain_returns_events_in_insertion_order():
	buffer = EventBuffer()
	events = [
		RequestEvent(method="GET", url="https://x/"),
		ResponseEvent(status=200, url="https://x/", content_type="text/html"),
	]
	for event in events:
		assert buffer.append(event) is True

	assert len(buffer) == 2
	assert buffer.drain() == events
	assert len(buffer) == 0


def test_drain_twice_is_rejected():
	buffer = EventBuffer()
	buffer.drain()
	with pytest.raises(RuntimeError, match="already drained"):
		buffer.drain()


def test_append_after_drain_is_dropped():
	buffer = EventBuffer()
	buffer.drain()

	assert buffer.append(RequestEvent(method="GET", url="https://x/")) is False
	assert buffer.dropped == 1
	assert len(buffer) == 0


def test_snapshot_does_not_drain():
	buffer = EventBuffer()
	buffer.append(RequestEvent(method="GET", url="https://x/"))

	assert len(buffer.snapshot()) == 1
	assert len(buffer.drain()) == 1


def test_concurrent_appends():
	buffer = EventBuffer()

	def worker(n):
		for i in range(500):
			buffer.append(RequestEvent(method="GET", url=f"https://x/{n}/{i}"))

	threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()

	assert len(buffer.drain()) == 3000
