"""Durable storage of the last observed headline snapshot."""

import json
import os
import threading
from pathlib import Path

from .errors import StorageError
from .logging_config import create_execution_logger
from .models import FeedSnapshot


class FileSnapshotStore:
    """Keeps one snapshot on disk using a candidate slot and atomic promotion.

    ``store`` writes ``<name>.candidate.json`` and fsyncs it, then replaces
    ``<name>.json`` with it in one rename. A crash at any point leaves the
    current slot holding either the old or the new snapshot in full.
    """

    def __init__(
        self,
        directory: Path | str = ".",
        name: str = "headlines",
        execution_id: str | None = None,
    ):
        self.directory = Path(directory)
        self.current_path = self.directory / f"{name}.json"
        self.candidate_path = self.directory / f"{name}.candidate.json"
        self.logger = create_execution_logger("snapshot_store", execution_id)
        self._write_lock = threading.Lock()

        self.logger.info(
            "FileSnapshotStore initialized", current_path=str(self.current_path)
        )

    def load(self) -> FeedSnapshot | None:
        """Read the current snapshot.

        Returns:
            The stored snapshot, or ``None`` if nothing has been stored yet

        Raises:
            StorageError: If the current slot exists but cannot be read or
                does not hold a JSON array of strings
        """
        try:
            with open(self.current_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            self.logger.info(
                "No stored snapshot found", current_path=str(self.current_path)
            )
            return None
        except (OSError, ValueError) as e:
            # ValueError covers malformed JSON and undecodable UTF-8
            self.logger.error(
                f"Failed to read snapshot {self.current_path}: {e}", error=str(e)
            )
            raise StorageError(f"Failed to read snapshot {self.current_path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(h, str) for h in data):
            error_msg = f"Snapshot {self.current_path} is not a JSON array of strings"
            self.logger.error(error_msg)
            raise StorageError(error_msg)

        self.logger.debug("Loaded stored snapshot", headlines_count=len(data))
        return FeedSnapshot.from_headlines(data)

    def store(self, snapshot: FeedSnapshot) -> None:
        """Write ``snapshot`` to the candidate slot and promote it to current.

        Raises:
            StorageError: If writing or promoting the candidate fails
        """
        with self._write_lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                with open(self.candidate_path, "w", encoding="utf-8") as f:
                    json.dump(snapshot.to_list(), f, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(self.candidate_path, self.current_path)
            except OSError as e:
                self.logger.error(
                    f"Failed to store snapshot {self.current_path}: {e}", error=str(e)
                )
                raise StorageError(
                    f"Failed to store snapshot {self.current_path}: {e}"
                ) from e

        self.logger.info(
            "Stored snapshot", headlines_count=len(snapshot), current_path=str(self.current_path)
        )
