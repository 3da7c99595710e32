import asyncio
import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from linkhub.constants import WS_GOING_AWAY_CODE, SHUTDOWN_MESSAGE
from linkhub.exceptions import DuplicateAddressError
from linkhub.logging import logger, short_identity
from linkhub.schemas.client import ClientSummary
from linkhub.schemas.frames import ExecuteFrame, OutboundFrame
from linkhub.settings import app_settings


def is_link_open(link: WebSocket) -> bool:
    """Whether both sides of a WebSocket still consider it connected."""
    return (
        link.client_state == WebSocketState.CONNECTED
        and link.application_state == WebSocketState.CONNECTED
    )


async def send_frame(link: WebSocket, frame: OutboundFrame) -> None:
    """Serialize a frame and send it as a text message."""
    await link.send_text(frame.model_dump_json())


@dataclass
class PayloadSnapshot:
    data: Any
    timestamp: Any
    received_at: datetime


@dataclass
class ClientEntry:
    """
    One admitted client link.

    identity, address, user_agent and link never change after creation;
    last_seen_at and last_payload are updated through the registry.
    """

    identity: str
    address: str
    user_agent: str
    link: WebSocket
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_seen_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_payload: PayloadSnapshot | None = None

    def summary(self) -> ClientSummary:
        return ClientSummary(
            identity=self.identity,
            address=self.address,
            user_agent=self.user_agent,
            connected_at=self.connected_at,
            last_seen_at=self.last_seen_at,
            has_payload_snapshot=self.last_payload is not None,
        )


class ClientRegistry:
    """
    Authoritative map of admitted client links.

    Entries are keyed by identity. At most one entry exists per address; the
    address check and the insert happen under one lock so concurrent attempts
    from the same address cannot both succeed. Failed broadcast sends never
    remove entries; only link close/error notifications do.
    """

    def __init__(self, send_timeout: float | None = None) -> None:
        """
        Initializes an empty registry.

        Args:
            send_timeout: Upper bound in seconds for a single broadcast send
                (default from settings).
        """
        self.send_timeout = (
            send_timeout
            if send_timeout is not None
            else app_settings.WS_SEND_TIMEOUT_SECONDS
        )
        self._entries: dict[str, ClientEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def try_add(
        self, address: str, user_agent: str, link: WebSocket
    ) -> ClientEntry:
        """
        Register a new link unless its address is already represented.

        Args:
            address: Resolved client address.
            user_agent: Client-supplied label.
            link: The accepted WebSocket.

        Returns:
            The newly created entry with a fresh identity.

        Raises:
            DuplicateAddressError: If an entry for this address exists (or the
                address is empty). No state is created.
        """
        if not address:
            raise DuplicateAddressError(str(address))

        with self._lock:
            if any(e.address == address for e in self._entries.values()):
                raise DuplicateAddressError(address)

            identity = str(uuid.uuid4())
            while identity in self._entries:
                identity = str(uuid.uuid4())

            entry = ClientEntry(
                identity=identity,
                address=address,
                user_agent=user_agent,
                link=link,
            )
            self._entries[identity] = entry

        logger.info(
            f"[CLIENT] New connection: {short_identity(identity)} address {address}"
        )
        return entry

    def remove(self, identity: str) -> ClientEntry | None:
        """
        Delete an entry; idempotent.

        Args:
            identity: Identity of the entry to remove.

        Returns:
            The removed entry, or None if it was already gone.
        """
        with self._lock:
            entry = self._entries.pop(identity, None)

        if entry is not None:
            logger.info(
                f"[CLIENT] Disconnected: {short_identity(identity)} "
                f"address released {entry.address}"
            )
        return entry

    def get(self, identity: str) -> ClientEntry | None:
        with self._lock:
            return self._entries.get(identity)

    def touch(self, identity: str) -> None:
        """Update last_seen_at; no-op if the entry is gone."""
        with self._lock:
            if entry := self._entries.get(identity):
                entry.last_seen_at = datetime.now(UTC)

    def store_payload(self, identity: str, data: Any, timestamp: Any) -> None:
        """Overwrite the latest payload snapshot; no-op if the entry is gone."""
        with self._lock:
            if entry := self._entries.get(identity):
                entry.last_payload = PayloadSnapshot(
                    data=data,
                    timestamp=timestamp,
                    received_at=datetime.now(UTC),
                )

    def snapshot(self) -> list[ClientSummary]:
        """
        Point-in-time copy of all entries, oldest connection first.

        Returns:
            List of summaries unaffected by later registry mutation.
        """
        with self._lock:
            summaries = [entry.summary() for entry in self._entries.values()]
        return sorted(summaries, key=lambda s: s.connected_at)

    def _entries_snapshot(self) -> list[ClientEntry]:
        with self._lock:
            return list(self._entries.values())

    async def _send_command(self, entry: ClientEntry, frame: ExecuteFrame) -> bool:
        """
        Send one command frame, bounded by send_timeout.

        Returns:
            True on success, False if the link is closed or the send failed.
        """
        if not is_link_open(entry.link):
            logger.debug(
                f"Skipping closed link {short_identity(entry.identity)}"
            )
            return False

        try:
            await asyncio.wait_for(
                send_frame(entry.link, frame), timeout=self.send_timeout
            )
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state
            logger.warning(
                f"Broadcast to {short_identity(entry.identity)} failed: {e}"
            )
            return False
        except TimeoutError:
            logger.warning(
                f"Broadcast to {short_identity(entry.identity)} timed out "
                f"after {self.send_timeout}s"
            )
            return False
        except Exception as e:
            logger.warning(
                f"Unexpected error broadcasting to "
                f"{short_identity(entry.identity)}: {e}"
            )
            return False

        return True

    async def broadcast(self, payload: str) -> tuple[int, int]:
        """
        Send a command frame carrying the payload to every registered link.

        Sends run concurrently so a slow recipient delays the others by at
        most send_timeout. Entries are never removed here.

        Args:
            payload: Command payload text.

        Returns:
            Tuple of (success_count, failure_count).
        """
        entries = self._entries_snapshot()
        if not entries:
            return 0, 0

        frame = ExecuteFrame(payload=payload)
        outcomes = await asyncio.gather(
            *[self._send_command(entry, frame) for entry in entries]
        )

        success_count = sum(1 for ok in outcomes if ok)
        return success_count, len(outcomes) - success_count

    async def close_all(self) -> int:
        """
        Close every registered link and empty the registry.

        Close errors are logged and ignored; in-flight frames are not flushed.

        Returns:
            Number of entries released.
        """
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()

        for entry in entries:
            if not is_link_open(entry.link):
                continue
            try:
                await entry.link.close(
                    code=WS_GOING_AWAY_CODE, reason=SHUTDOWN_MESSAGE
                )
            except (RuntimeError, ConnectionError, WebSocketDisconnect) as e:
                logger.debug(
                    f"Error closing {short_identity(entry.identity)}: {e}"
                )

        if entries:
            logger.info(f"Closed {len(entries)} client link(s)")
        return len(entries)
