import json
import logging
from datetime import UTC, datetime
from typing import Any


class StructuredLogger:
    """Writes share-link activity as one JSON object per log line.

    Every event is tied to the share token it came through, so views and
    downloads of one gallery link can be followed across the log.
    """

    def __init__(self, name: str = "photodrop.events"):
        self._logger = logging.getLogger(name)

    def log_event(self, event: str, share_token: str, **fields: Any) -> None:
        """Emit ``event`` for ``share_token``, e.g.

        logger.log_event("download_zip", token, gallery_id=gallery.id, image_count=3, archive_size=4096)

        Values that are not JSON types (UUIDs, datetimes) are written with ``str``.
        """
        payload = {"timestamp": datetime.now(UTC).isoformat(), "event": event, "share_token": share_token, **fields}
        self._logger.info(json.dumps(payload, default=str))


logger = StructuredLogger()

__all__ = ["logger", "StructuredLogger"]
