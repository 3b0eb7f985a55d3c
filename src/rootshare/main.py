# filename: src/rootshare/main.py
#!/usr/bin/env python3
"""
RootShare - Sandboxed File Manager Server
Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __app_name__, __version__
from .core import constants
from .core.config import ConfigManager, FileManagerConfig
from .core.exceptions import ConfigurationError
from .core.logging_config import setup_logging
from .core.server_controller import ServerController


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rootshare",
        description="Share one directory tree over HTTP with a browser file manager.",
    )
    parser.add_argument("--root", help="Directory to serve (created if missing)")
    parser.add_argument("--host", help=f"Interface to bind (default {constants.DEFAULT_HOST})")
    parser.add_argument("--port", type=int, help=f"Port to listen on (default {constants.DEFAULT_PORT})")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--no-file-log", action="store_true", help="Log to the console only")
    parser.add_argument("--open-browser", action="store_true", help="Open the web UI once started")
    parser.add_argument("--version", action="version", version=f"{__app_name__} v{__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for RootShare."""
    args = build_parser().parse_args(argv)

    try:
        config_manager = ConfigManager(args.config)
        settings = config_manager.build_settings(
            root_path=args.root,
            host=args.host,
            server_port=args.port,
            log_level=args.log_level,
        )
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    setup_logging(level=getattr(logging, settings.log_level), file_logging=not args.no_file_log)
    log = logging.getLogger(__name__)
    log.info(f"Starting {__app_name__} v{__version__}")

    try:
        config = FileManagerConfig.from_settings(settings)
        controller = ServerController(settings, config)
        if args.open_browser:
            controller.open_web_ui()
        return controller.run_forever()
    except ConfigurationError as e:
        log.critical(f"Configuration error: {e}")
        return 2
    except Exception as e:
        log.critical(f"Failed to start {__app_name__}: {e}", exc_info=True)
        print(f"ERROR: Could not start {__app_name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
