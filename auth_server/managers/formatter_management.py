# auth_server/managers/formatter_management.py
import logging
import re
import sys
from flask import has_request_context, request
from colorama import Fore, Style, init as colorama_init

# Enable ANSI colors everywhere (even inside docker logs)
colorama_init(strip=False, convert=False)


class CustomFormatter(logging.Formatter):
    LEVEL_COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.MAGENTA,
    }

    def format(self, record):
        # other handlers (and pytest's caplog) must see the untouched record
        record = logging.makeLogRecord(record.__dict__)

        level_text = record.levelname
        padded = level_text.ljust(8)  # pad BEFORE coloring
        color = self.LEVEL_COLORS.get(level_text, "")
        record.levelname = f"{color}{padded}{Style.RESET_ALL}"

        # Werkzeug access logs
        if record.name == "werkzeug":
            record.filename = "werkzeug"
            record.lineno = 0

            # 127.0.0.1 - - [30/Oct/2025 17:12:40] "POST /api/user/login HTTP/1.1" 200 -
            message = record.getMessage()
            match = re.search(r'"([A-Z]+) (.*?) HTTP/.*" (\d+)', message)
            if match:
                method, path, status = match.groups()
                record.msg = f"{method} {path} {status}"
            else:
                record.msg = re.sub(r'^\S+ - - \[[^\]]+\] ', '', message)
            record.args = None

            return super().format(record)

        # App logs -> include request path
        if has_request_context():
            record.msg = f"{request.method} {request.path} | {record.getMessage()}"
            record.args = None

        return super().format(record)


def configure_logging(app):
    # Remove Flask default handler
    app.logger.handlers.clear()

    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    invalid_level = None
    if not isinstance(logging.getLevelName(level), int):
        invalid_level, level = level, "INFO"

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)

    formatter = CustomFormatter(
        fmt="%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler.setFormatter(formatter)
    app.logger.addHandler(console_handler)
    app.logger.setLevel(level)

    # lifecycle lines are written whatever LOG_LEVEL says
    app.logger.getChild("lifecycle").setLevel(logging.INFO)

    # Werkzeug uses the same format
    werkzeug_logger = logging.getLogger("werkzeug")
    werkzeug_logger.handlers.clear()
    werkzeug_handler = logging.StreamHandler(sys.stdout)
    werkzeug_handler.setFormatter(formatter)
    werkzeug_logger.addHandler(werkzeug_handler)
    werkzeug_logger.setLevel(logging.INFO)

    if invalid_level:
        app.logger.warning(f"unknown LOG_LEVEL '{invalid_level}', using INFO")
    app.logger.debug("Logging system initialized")
