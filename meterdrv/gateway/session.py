"""
Gateway Session

Owns the single connection to a serial-over-TCP bridge that every
meter on the serial segment shares.

Lifecycle:
- init() tears down any existing handle and opens a fresh one
- reinit() repeats init() with the stored endpoint
- reconnect() re-opens the existing handle in place with a bounded,
  linearly growing delay between attempts
"""

import time

from ..common.config import GatewayEndpoint
from ..common.exceptions import CommunicationError, ConfigurationError
from ..common.logging_setup import get_component_logger
from .rwlock import ReadWriteLock
from .transport import ErrorKind, PymodbusTransport, Transport, TransportFactory

logger = get_component_logger("gateway.session")


class GatewaySession:
    """
    One bridge, at most one live connection handle.

    The session never locks on its own; drivers hold ``lock`` for the
    duration of each operation, and callers may hold it longer to keep
    a multi-step interaction with one meter uninterrupted.
    """

    SETTLE_DELAY_S = 0.1       # after closing a handle whose endpoint changed
    REFUSED_BACKOFF_S = 5.0    # before opening when the bridge last refused us
    RECONNECT_ATTEMPTS = 6
    RECONNECT_STEP_S = 0.05    # attempt i waits i * step

    def __init__(self, transport_factory: TransportFactory = PymodbusTransport):
        self._factory = transport_factory
        self._client: Transport | None = None
        self._endpoint: GatewayEndpoint | None = None
        self._lock = ReadWriteLock()
        self.last_error: Exception | None = None

    @property
    def endpoint(self) -> GatewayEndpoint | None:
        return self._endpoint

    @property
    def client(self) -> Transport | None:
        return self._client

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    def get_client(self) -> Transport | None:
        """Current connection handle, or None when there is none"""
        return self._client

    def init(self, endpoint: GatewayEndpoint) -> None:
        """
        Open a new connection to the bridge.

        Any existing handle is closed first, ignoring close errors. When
        the endpoint changed, a short settle delay follows the close. If
        the previous attempt was refused by the bridge, a longer backoff
        precedes the open so a rejecting bridge is not hammered.

        On failure the session is left without a handle and the error
        is raised; the stored endpoint is kept so reinit() can retry.

        Raises:
            CommunicationError: if the connection could not be opened
        """
        changed = self._endpoint is not None and endpoint != self._endpoint

        if self._client is not None:
            self._close_quietly(self._client)
            self._client = None
            if changed:
                logger.info(
                    f"Gateway parameters changed, reopening {endpoint.address}",
                    extra={"baud_rate": endpoint.baud_rate, "timeout": endpoint.timeout},
                )
                time.sleep(self.SETTLE_DELAY_S)

        self._endpoint = endpoint

        if self._last_error_kind() == ErrorKind.REFUSED:
            logger.warning(
                f"Bridge {endpoint.address} refused the last connection, "
                f"backing off {self.REFUSED_BACKOFF_S}s"
            )
            time.sleep(self.REFUSED_BACKOFF_S)

        client = self._factory(endpoint)
        try:
            client.open()
        except CommunicationError as e:
            self.last_error = e
            logger.error(f"Failed to open {endpoint.address}: {e}")
            raise

        self.last_error = None
        self._client = client
        logger.info(f"Gateway connected: {endpoint.address}")

    def reinit(self) -> None:
        """Re-run init() with the stored endpoint"""
        if self._endpoint is None:
            raise ConfigurationError("Gateway session was never initialised")
        self.init(self._endpoint)

    def reconnect(self, max_attempts: int | None = None) -> None:
        """
        Close and re-open the existing handle until it succeeds.

        Attempt i (0-based) waits i * RECONNECT_STEP_S before opening.
        The handle object is reused, not replaced. With no handle at
        all, this falls back to reinit().

        Raises:
            ConfigurationError: max_attempts is below 1
            CommunicationError: the last open error once every attempt failed
        """
        attempts = self.RECONNECT_ATTEMPTS if max_attempts is None else max_attempts
        if attempts < 1:
            raise ConfigurationError(f"Reconnect needs at least one attempt, got {attempts}")

        if self._client is None:
            logger.warning("Reconnect requested without a handle, reinitialising")
            self.reinit()
            return

        client = self._client
        last_error: CommunicationError | None = None
        for attempt in range(attempts):
            self._close_quietly(client)
            time.sleep(attempt * self.RECONNECT_STEP_S)
            try:
                client.open()
            except CommunicationError as e:
                last_error = e
                logger.warning(
                    f"Reconnect attempt {attempt + 1}/{attempts} failed: {e}"
                )
                continue

            self.last_error = None
            logger.info(f"Reconnected after {attempt + 1} attempt(s)")
            return

        self.last_error = last_error
        logger.error(f"Reconnect gave up after {attempts} attempts")
        raise last_error

    def close(self) -> None:
        """Close and drop the current handle"""
        if self._client is not None:
            self._close_quietly(self._client)
            self._client = None

    def _close_quietly(self, client: Transport) -> None:
        try:
            client.close()
        except CommunicationError as e:
            logger.debug(f"Ignoring close error: {e}")

    def _last_error_kind(self) -> ErrorKind | None:
        return getattr(self.last_error, "kind", None)
