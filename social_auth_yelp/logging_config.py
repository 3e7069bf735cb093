"""
Logging configuration for Cloud Run and local environments.

Automatically detects Cloud Run environment and configures appropriate logging:
- Cloud Run: google-cloud-logging with trace correlation
- Local/Test: Standard Python logging to stdout with JSON formatting
"""

import json
import logging
import os
from datetime import UTC, datetime


# Attributes every LogRecord has; anything else came in through extra=
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """
    Custom JSON log formatter.

    Ensures that logs in local development are structured JSON,
    similar to what Google Cloud Logging expects.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A JSON string representing the log record.
        """
        log_object = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        # Fields passed with extra={...}
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_object[key] = value

        if record.exc_info:
            log_object["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_object, default=str)


def setup_global_logging() -> None:
    """
    Configure global logging based on environment.

    When running in Cloud Run (K_SERVICE env var is set):
    - Uses google-cloud-logging for structured logs with trace correlation.

    When running locally or in tests:
    - Uses standard Python logging with a custom JSON formatter.
    - Logs are sent to stdout in a structured JSON format.
    """
    is_cloud_run = os.getenv("K_SERVICE") is not None
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    if is_cloud_run:
        try:
            import google.cloud.logging

            client = google.cloud.logging.Client()
            client.setup_logging(log_level=logging.getLevelName(level))
            logging.info("Cloud Logging initialized for Cloud Run.")
        except Exception as e:
            # Fallback for Cloud Logging import/initialization errors
            logging.basicConfig(
                level=level,
                format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            )
            logging.warning(f"Cloud Logging setup failed, using basic config: {e}")
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())

        root_logger = logging.getLogger()
        # Replace existing handlers to avoid duplicate logs
        for h in list(root_logger.handlers):
            root_logger.removeHandler(h)
        root_logger.addHandler(handler)
        root_logger.setLevel(level)
