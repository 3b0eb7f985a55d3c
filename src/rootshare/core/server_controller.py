# src/rootshare/core/server_controller.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import signal
import sys
import threading
import webbrowser

import uvicorn

from . import constants
from .config import AppSettings, FileManagerConfig
from .exceptions import ServerError
from .utils import DummyTty

log = logging.getLogger(__name__)


class ServerController:
    """Manages the lifecycle of the file manager HTTP server."""

    def __init__(self, settings: AppSettings, config: FileManagerConfig):
        self.settings = settings
        self.config = config
        self.api_server = None
        self.api_thread = None
        self._stopped = threading.Event()
        self.status = "stopped"

    def get_port(self):
        return self.settings.server_port

    def get_web_ui_url(self):
        return f"http://{self.settings.host}:{self.get_port()}{constants.UI_PREFIX}/"

    def start(self):
        if self.api_thread and self.api_thread.is_alive():
            raise ServerError("Server is already running")
        self.status = "starting"
        self._stopped.clear()
        self.api_thread = threading.Thread(target=self._run_api_server, daemon=True)
        self.api_thread.start()
        self.status = "running"
        log.info(f"Serving {self.config.root} on {self.settings.host}:{self.get_port()}")

    def stop(self):
        self.status = "stopping"
        if self.api_server:
            self.api_server.should_exit = True
        if self.api_thread and self.api_thread is not threading.current_thread():
            self.api_thread.join(timeout=5.0)
        self.api_server = None
        self.api_thread = None
        self.status = "stopped"
        self._stopped.set()
        log.info("Server stopped.")

    def run_forever(self) -> int:
        """Starts the server and blocks until SIGINT/SIGTERM or the server exits."""

        def _handle_signal(signum, frame):
            log.info(f"Received signal {signum}, shutting down.")
            self._stopped.set()

        signal.signal(signal.SIGINT, _handle_signal)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, _handle_signal)

        self.start()
        while not self._stopped.wait(timeout=0.5):
            if self.api_thread and not self.api_thread.is_alive():
                log.error("Server thread exited unexpectedly.")
                self.stop()
                return 1
        self.stop()
        return 0

    def open_web_ui(self):
        webbrowser.open(self.get_web_ui_url())

    def _run_api_server(self):
        if sys.stdout is None: sys.stdout = DummyTty()
        if sys.stderr is None: sys.stderr = DummyTty()

        from ..api_server.api import create_api_app

        app = create_api_app(self.config)
        config = uvicorn.Config(
            app=app,
            host=self.settings.host,
            port=self.get_port(),
            log_level=self.settings.log_level.lower(),
            log_config=None,
        )
        self.api_server = uvicorn.Server(config)
        self.api_server.run()
