"""File-backed in-memory fallback store used when Redis is not reachable."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..models.schemas import EnrichedRecord

logger = logging.getLogger(__name__)


class LocalNewsStore:
    """
    Process-wide index of enriched records mirrored to a single JSON file.

    Every write serialises the whole index (no partial writes), so concurrent
    writers race and the last completed write wins. Once the file cannot be
    written the store switches to memory-only for the rest of the process and
    the in-memory index stays authoritative.
    """

    def __init__(self, storage_file: Path):
        self.storage_file = Path(storage_file)
        self.records: Dict[str, EnrichedRecord] = {}
        self.memory_only = False

    def initialize(self) -> None:
        """Create the data directory and load any existing records."""
        logger.debug(f"Using storage path: {self.storage_file}")
        try:
            self.storage_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not initialize storage (falling back to in-memory): {e}")
            self.records.clear()
            self.memory_only = True
            return
        self.reload()

    def reload(self) -> None:
        """Replace the in-memory index with the file contents, if readable."""
        if self.memory_only:
            return
        try:
            text = self.storage_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No existing storage file found, starting fresh")
            return
        except OSError as e:
            logger.warning(f"Could not read storage file {self.storage_file}: {e}")
            return

        try:
            data = json.loads(text)
            records = {news_id: EnrichedRecord.model_validate(item) for news_id, item in data.items()}
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.storage_file}: {e}")
            return

        self.records = records
        logger.info(f"Loaded {len(self.records)} news articles from storage")

    def save(self) -> None:
        """Write the whole index; failures keep the process running in memory."""
        if self.memory_only:
            return
        payload = {news_id: record.model_dump(mode="json") for news_id, record in self.records.items()}
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.storage_file.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            os.replace(tmp_path, self.storage_file)
            logger.debug("Saved news data to storage")
        except OSError as e:
            logger.warning(f"Failed to save to storage (continuing with in-memory): {e}")
            self.memory_only = True
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def upsert(self, record: EnrichedRecord) -> None:
        self.records[record.id] = record
        self.save()

    def get(self, news_id: str) -> Optional[EnrichedRecord]:
        return self.records.get(news_id)

    def all(self) -> List[EnrichedRecord]:
        return list(self.records.values())
