from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        tile_id = getattr(record, "tile_id", None)
        if tile_id:
            payload["tile_id"] = tile_id
        mode = getattr(record, "mode", None)
        if mode:
            payload["mode"] = mode
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(*, level: str, json_logs: bool) -> None:
    root = logging.getLogger()
    log_level = getattr(logging, level.strip().upper(), logging.INFO)
    root.setLevel(log_level)

    handler = logging.StreamHandler()
    if json_logs:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )

    root.handlers = [handler]
