# -*- coding: utf-8 -*-
"""
Single Instance Application Manager

Uses QLocalServer/QLocalSocket to detect an already running instance and
forward command line requests to it. A second launch encodes its
CommandOptions, sends them to the primary instance, and exits.

Usage Example:
    from core.single_instance import SingleInstanceManager

    manager = SingleInstanceManager("clementine-remote")
    if manager.is_running():
        sys.exit(0 if manager.send_command(options) else 1)

    manager.start_server()
    manager.command_received.connect(player.handle_command)
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtNetwork import QLocalServer, QLocalSocket

from core.options_codec import MalformedRecordError, decode, encode
from models.command_options import CommandOptions

logger = logging.getLogger(__name__)


class SingleInstanceManager(QObject):
    """Single Instance Application Manager

    Attributes:
        command_received: Emitted with the decoded CommandOptions each time
            another instance forwards a well-formed record.
    """

    command_received = pyqtSignal(object)

    # Connection timeout (milliseconds)
    DEFAULT_TIMEOUT_MS = 1000

    def __init__(
        self,
        server_name: str,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        parent: Optional[QObject] = None,
    ):
        """Initialize the single instance manager

        Args:
            server_name: Local server name shared by all instances.
            timeout_ms: Timeout for connecting and writing.
            parent: Parent QObject
        """
        super().__init__(parent)
        self._server_name = server_name
        self._timeout_ms = timeout_ms
        self._server: Optional[QLocalServer] = None

        logger.debug("SingleInstanceManager initialized, server_name=%s", server_name)

    @property
    def server_name(self) -> str:
        """Local server name shared by all instances"""
        return self._server_name

    def is_running(self) -> bool:
        """Check if another instance is already running

        Returns:
            True if a connection to the primary instance's server succeeded.
        """
        socket = QLocalSocket()
        socket.connectToServer(self._server_name)

        is_connected = socket.waitForConnected(self._timeout_ms)

        if is_connected:
            logger.info("Existing instance detected running")
            socket.disconnectFromServer()
        else:
            logger.debug("No running instance detected")

        return is_connected

    def send_command(self, options: CommandOptions) -> bool:
        """Forward command options to the primary instance

        Returns:
            True if the encoded record was written completely.
        """
        socket = QLocalSocket()
        socket.connectToServer(self._server_name)

        if not socket.waitForConnected(self._timeout_ms):
            logger.error("Could not connect to primary instance: %s", socket.errorString())
            return False

        payload = encode(options)
        socket.write(payload)
        socket.flush()

        if not socket.waitForBytesWritten(self._timeout_ms):
            logger.error("Failed to send command options: %s", socket.errorString())
            socket.disconnectFromServer()
            return False

        logger.info("Forwarded command options to primary instance (%d bytes)", len(payload))
        socket.disconnectFromServer()
        if socket.state() != QLocalSocket.LocalSocketState.UnconnectedState:
            socket.waitForDisconnected(self._timeout_ms)
        return True

    def start_server(self) -> bool:
        """Start the local server

        Returns:
            True if server started successfully, False otherwise.
        """
        self._server = QLocalServer(self)

        # Remove any leftover server file (e.g., from a previous crash)
        QLocalServer.removeServer(self._server_name)

        if not self._server.listen(self._server_name):
            logger.error(
                "Could not start local server: %s",
                self._server.errorString()
            )
            return False

        self._server.newConnection.connect(self._on_new_connection)

        logger.info("Local server started, listening on: %s", self._server_name)
        return True

    def _on_new_connection(self) -> None:
        """Start collecting data from each pending connection"""
        if self._server is None:
            return

        while self._server.hasPendingConnections():
            socket = self._server.nextPendingConnection()
            if socket is None:
                return

            # The sender writes one record and disconnects
            payload = bytearray()
            socket.readyRead.connect(lambda s=socket, p=payload: p.extend(s.readAll().data()))
            socket.disconnected.connect(lambda s=socket, p=payload: self._on_disconnected(s, p))

            if socket.state() == QLocalSocket.LocalSocketState.UnconnectedState:
                self._on_disconnected(socket, payload)

    def _on_disconnected(self, socket: QLocalSocket, payload: bytearray) -> None:
        """Handle everything a finished connection sent"""
        socket.readyRead.disconnect()
        socket.disconnected.disconnect()
        payload.extend(socket.readAll().data())
        socket.deleteLater()

        if not payload:
            # is_running() connects and leaves without sending
            logger.debug("Ignoring connection that sent no data")
            return

        self.handle_payload(bytes(payload))

    def handle_payload(self, payload: bytes) -> Optional[CommandOptions]:
        """Decode a forwarded record and emit command_received

        Returns:
            The decoded options, or None if the payload was malformed.
        """
        try:
            options = decode(payload)
        except MalformedRecordError as e:
            logger.warning("Dropping malformed command options (%d bytes): %s", len(payload), e)
            return None

        logger.info("Command options received from another instance")
        self.command_received.emit(options)
        return options

    def cleanup(self) -> None:
        """Clean up resources

        Closes the server and removes the server file. Typically called when the application exits.
        """
        if self._server is not None:
            self._server.close()
            QLocalServer.removeServer(self._server_name)
            self._server = None
            logger.debug("Local server closed")
