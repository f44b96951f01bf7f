"""
Structured logging configuration for Notes2Quote.
Import and call setup_logging() once at app startup.

Loggers live under "notes2quote.*". Records may carry the keys in
EXTRA_FIELDS via `extra=`; both formatters surface them.
"""
import logging
import logging.handlers
import os
import json
from datetime import datetime, timezone

from notes2quote.core.paths import LOG_DIR

# route/method/duration_ms: dashboard request log
# quote_number/total: db saves and PDF renders
EXTRA_FIELDS = ("route", "method", "duration_ms", "quote_number", "total")

LOG_FILE = "notes2quote.log"


class JSONFormatter(logging.Formatter):
    """One JSON object per line for the rotating file and N2Q_JSON_LOGS."""
    def format(self, record):
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Short console lines, tagged with the quote number when there is one."""
    COLORS = {
        "DEBUG": "\033[36m", "INFO": "\033[32m",
        "WARNING": "\033[33m", "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, color=False):
        super().__init__()
        self.color = color

    def format(self, record):
        ts = datetime.now().strftime("%H:%M:%S")
        line = f"{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}"
        quote_number = getattr(record, "quote_number", None)
        if quote_number and quote_number not in line:
            line += f" ({quote_number})"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        if not self.color:
            return line
        return f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"


def setup_logging(level=None, json_logs=None, log_dir=None):
    """
    Configure the root logger for the app.

    Args:
        level: Override log level (default: from LOG_LEVEL env or INFO)
        json_logs: JSON on the console too (default: N2Q_JSON_LOGS env, else False)
        log_dir: Where the rotating JSON log goes (default: DATA_DIR/logs)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if json_logs is None:
        json_logs = os.environ.get("N2Q_JSON_LOGS", "").lower() in ("1", "true", "yes")
    log_dir = log_dir or LOG_DIR

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    if json_logs:
        console.setFormatter(JSONFormatter())
    else:
        tty = getattr(console.stream, "isatty", lambda: False)()
        console.setFormatter(HumanFormatter(color=tty))
    root.addHandler(console)

    # 5MB x 5 backups, always JSON
    log_path = os.path.join(log_dir, LOG_FILE)
    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000,
                                                  backupCount=5, encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)
    except OSError:
        log_path = None
        root.warning("File logging disabled: %s not writable", log_dir)

    for name in ("werkzeug", "PIL", "reportlab", "pdfminer"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("notes2quote").info("Logging at %s (json=%s, file=%s)",
                                          level, bool(json_logs), log_path)
