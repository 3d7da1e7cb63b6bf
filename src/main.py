"""
Clementine Remote - Main Entry Point

Parses the command line and either forwards the request to a running
instance or becomes the primary instance that receives them.
"""

import sys
import os
import logging
from typing import List, Optional

# Add src to path
src_path = os.path.dirname(os.path.abspath(__file__))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from core.command_line_parser import CommandLineError, CommandLineParser, HelpRequest
from core.help_text import load_translations
from models.command_options import CommandOptions
from services.config_service import ConfigService

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

# Console handler installed by configure_logging()
_console_handler: Optional[logging.Handler] = None


def configure_logging(level: str = "WARNING") -> None:
    """Attach a single console handler to the root logger"""
    root = logging.getLogger()
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    root.setLevel(numeric_level)

    global _console_handler
    if _console_handler is None or _console_handler not in root.handlers:
        _console_handler = logging.StreamHandler()
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_console_handler)


def _log_command(options: CommandOptions) -> None:
    logger.info("Remote command: %s", options.to_dict())


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point"""
    if argv is None:
        argv = sys.argv[1:]

    config = ConfigService()
    configure_logging(config.get("logging.level", "WARNING"))

    parser = CommandLineParser(
        strict_numbers=bool(config.get("command_line.strict_numbers", False)),
        translations=load_translations(config.get("i18n.translations_file")),
    )

    try:
        result = parser.parse(argv)
    except CommandLineError as e:
        print(f"{CommandLineParser.PROG}: {e}", file=sys.stderr)
        return 1

    if isinstance(result, HelpRequest):
        print(result.text, end="")
        return 0

    from PyQt6.QtCore import QCoreApplication
    from core.single_instance import SingleInstanceManager

    app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
    app.setApplicationName(config.get("app.name", "Clementine"))

    # === Single Instance Detection ===
    instance_manager = SingleInstanceManager(
        config.get("single_instance.server_name", "clementine-remote"),
        timeout_ms=int(config.get("single_instance.timeout_ms", SingleInstanceManager.DEFAULT_TIMEOUT_MS)),
    )

    if instance_manager.is_running():
        return 0 if instance_manager.send_command(result) else 1

    if not instance_manager.start_server():
        return 1

    # The player itself subscribes to command_received; locally requested
    # commands go through the same path.
    instance_manager.command_received.connect(_log_command)
    if not result.is_empty():
        instance_manager.command_received.emit(result)

    try:
        return app.exec()
    finally:
        instance_manager.cleanup()


if __name__ == "__main__":
    sys.exit(main())
