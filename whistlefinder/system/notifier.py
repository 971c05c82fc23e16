"""User facing notification channels.

Both notifiers key notifications by id: publishing again with the same id
replaces the earlier notification instead of adding another one.
"""
from __future__ import annotations

import json
import logging
import socket
import time
from dataclasses import dataclass, field
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass
class ConsoleNotifier:
    """Keeps pending notifications in memory and writes them to the log."""

    pending: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    published: int = 0

    def publish(self, notification_id: str, title: str, body: str) -> None:
        replaced = notification_id in self.pending
        self.pending[notification_id] = (title, body)
        self.published += 1
        logger.warning("[%s] %s%s", title, body, " (replaced)" if replaced else "")

    def withdraw(self, notification_id: str) -> None:
        if self.pending.pop(notification_id, None) is not None:
            logger.info("Notification %s withdrawn", notification_id)


def resolve_host(host: str) -> str:
    try:
        return socket.gethostbyname(host)
    except OSError as e:
        logger.warning("Could not resolve %s: %s", host, e)
        return host


class UDPNotifier:
    """Sends notifications as JSON datagrams to a companion device.

    The receiver is expected to show one notification per id, replacing
    the content when the same id arrives again.
    """

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port
        self.address = (resolve_host(host), port)
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def send(self, msg: dict) -> None:
        payload = json.dumps(msg).encode("utf-8")
        try:
            self.sock.sendto(payload, self.address)
        except OSError:
            # Host may have changed address, resolve once more then give up
            self.address = (resolve_host(self.host), self.port)
            self.sock.sendto(payload, self.address)

    def publish(self, notification_id: str, title: str, body: str) -> None:
        self.send(
            {
                "type": "notification",
                "id": notification_id,
                "title": title,
                "body": body,
                "ts": time.time(),
            }
        )

    def withdraw(self, notification_id: str) -> None:
        self.send({"type": "withdraw", "id": notification_id, "ts": time.time()})

    def close(self) -> None:
        self.sock.close()
