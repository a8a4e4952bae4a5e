"""
CDP Browser Session Factory

Creates browser sessions against a running kernel-image Chromium over the
Chrome DevTools Protocol. The websocket URL is discovered through the
browser's /json/version endpoint, then every session gets its own CDP client
attached to a fresh about:blank target.

cdp-use is asyncio based while test hooks are synchronous, so all CDP
coroutines run on a private event loop in a daemon thread. CDP event
callbacks fire on that thread.
"""
import asyncio
import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Optional, TypeVar

import httpx
from cdp_use import CDPClient
from uuid_extensions import uuid7str

from qa_netcapture.config import Settings, settings
from qa_netcapture.errors import SessionInitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventLoopThread:
	"""Asyncio event loop running forever in a daemon thread."""

	def __init__(self, name: str = "qa-netcapture-cdp"):
		self._loop = asyncio.new_event_loop()
		self._thread = threading.Thread(target=self._run_loop, name=name, daemon=True)
		self._thread.start()

	def _run_loop(self) -> None:
		asyncio.set_event_loop(self._loop)
		self._loop.run_forever()

	@property
	def is_running(self) -> bool:
		return self._thread.is_alive() and not self._loop.is_closed()

	def run(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
		"""
		Run a coroutine on the loop thread and wait for its result

		Raises:
			concurrent.futures.TimeoutError: If the coroutine did not finish in time; it is cancelled on the loop
		"""
		future = asyncio.run_coroutine_threadsafe(coro, self._loop)
		try:
			return future.result(timeout)
		except concurrent.futures.TimeoutError:
			future.cancel()
			raise

	def stop(self) -> None:
		if self._loop.is_closed():
			return
		self._loop.call_soon_threadsafe(self._loop.stop)
		self._thread.join(timeout=5)
		if self._thread.is_alive():
			logger.warning(f"CDP event loop thread {self._thread.name} did not stop; leaving its loop open")
			return
		self._loop.close()


@dataclass
class BrowserSession:
	"""Handle for one live browser session (one attached page target)."""

	id: str
	cdp_url: str
	target_id: str
	cdp_session_id: str
	cdp_client: Any = field(repr=False)


@dataclass
class CDPChannel:
	"""Debugging-protocol channel bound to one session's page target."""

	session: BrowserSession
	runner: EventLoopThread = field(repr=False)
	timeout: Optional[float] = None

	@property
	def cdp_client(self) -> Any:
		return self.session.cdp_client

	@property
	def session_id(self) -> str:
		return self.session.cdp_session_id

	def run(self, coro: Awaitable[T]) -> T:
		return self.runner.run(coro, self.timeout)


class CDPSessionFactory:
	"""
	Session factory backed by a kernel-image CDP endpoint

	Args:
		config: Settings with kernel_cdp_host, kernel_cdp_port and cdp_timeout
	"""

	def __init__(self, config: Optional[Settings] = None):
		self._config = config or settings
		self._runner: Optional[EventLoopThread] = None
		self._runner_lock = threading.Lock()

	@property
	def timeout(self) -> float:
		return self._config.cdp_timeout / 1000

	def _get_runner(self) -> EventLoopThread:
		with self._runner_lock:
			if self._runner is None or not self._runner.is_running:
				self._runner = EventLoopThread()
			return self._runner

	def create_session(self) -> BrowserSession:
		"""
		Connect to the browser and attach to a new page target

		Raises:
			SessionInitError: If the CDP endpoint cannot be reached or the target cannot be attached
		"""
		http_url = self._config.cdp_http_url
		logger.info(f"=== Creating browser session ===")
		logger.info(f"Querying CDP endpoint at: {http_url}")
		try:
			return self._get_runner().run(self._create_session(http_url), self.timeout)
		except SessionInitError:
			raise
		except (httpx.TimeoutException, concurrent.futures.TimeoutError) as e:
			raise SessionInitError(
				f"Timeout connecting to browser at {http_url}. "
				"Please ensure the browser is running."
			) from e
		except httpx.HTTPError as e:
			raise SessionInitError(
				f"Failed to connect to browser at {http_url}: {e}. "
				"Please ensure the browser is running and accessible."
			) from e
		except Exception as e:
			logger.error(f"Failed to start browser session: {e}", exc_info=True)
			raise SessionInitError(f"Failed to start browser session: {e}") from e

	async def _get_websocket_url(self, http_url: str) -> str:
		async with httpx.AsyncClient(timeout=self.timeout) as client:
			response = await client.get(f"{http_url}/json/version")
			response.raise_for_status()
			version_data = response.json()
		cdp_url = version_data.get("webSocketDebuggerUrl")
		if not cdp_url:
			raise SessionInitError("Failed to obtain CDP WebSocket URL")
		logger.info(f"Got WebSocket URL: {cdp_url}")
		return cdp_url

	async def _create_session(self, http_url: str) -> BrowserSession:
		cdp_url = await self._get_websocket_url(http_url)

		cdp_client = CDPClient(cdp_url)
		await cdp_client.start()
		try:
			new_target = await cdp_client.send.Target.createTarget(params={"url": "about:blank"})
			target_id = new_target["targetId"]
			attach_result = await cdp_client.send.Target.attachToTarget(params={
				"targetId": target_id,
				"flatten": True,
			})
		except BaseException:
			# also runs when a timed-out run() cancels this task
			await cdp_client.stop()
			raise

		session = BrowserSession(
			id=uuid7str(),
			cdp_url=cdp_url,
			target_id=target_id,
			cdp_session_id=attach_result["sessionId"],
			cdp_client=cdp_client,
		)
		logger.info(f"Browser session {session.id} attached to target {target_id}")
		return session

	def open_debug_channel(self, handle: BrowserSession) -> CDPChannel:
		if handle.cdp_client is None:
			raise SessionInitError(f"Browser session {handle.id} has no CDP client")
		return CDPChannel(session=handle, runner=self._get_runner(), timeout=self.timeout)

	def close_session(self, handle: BrowserSession) -> None:
		"""Close the session's page target and disconnect its CDP client."""
		logger.info(f"Cleaning up browser session: {handle.id}")
		self._get_runner().run(self._close_session(handle), self.timeout)
		logger.info(f"Browser session {handle.id} cleaned up successfully")

	async def _close_session(self, handle: BrowserSession) -> None:
		try:
			await handle.cdp_client.send.Target.closeTarget(params={"targetId": handle.target_id})
		except Exception as e:
			logger.warning(f"Failed to close target {handle.target_id}: {e}")
		finally:
			await handle.cdp_client.stop()

	def shutdown(self) -> None:
		"""Stop the CDP event loop thread."""
		with self._runner_lock:
			if self._runner is not None:
				self._runner.stop()
				self._runner = None
