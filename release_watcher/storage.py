"""
JSON file storage for the last-seen release tag of each repository.

Persists the tag cache between restarts so only real changes
trigger notifications.
"""

import json
import logging
from pathlib import Path

from platformdirs import user_cache_dir

logger = logging.getLogger(__name__)


class CacheStore:
    """
    Flat repository -> tag mapping stored as a JSON object.

    The whole mapping is rewritten on every save.
    """

    def __init__(self, cache_file: str | Path, cache_dir: str | Path | None = None):
        """
        Initialize storage with the cache file location.

        Parameters
        ----------
        cache_file : str | Path
            Name of the cache file.
        cache_dir : str | Path | None
            Directory holding the file. Defaults to the per-user cache
            directory of the platform.
        """
        if cache_dir is None:
            cache_dir = user_cache_dir()
        self.path = Path(cache_dir) / cache_file

    def load(self) -> dict[str, str]:
        """
        Load the cache from disk.

        Creates the file (and its parent directories) holding an empty
        object when it does not exist yet. A file that cannot be parsed
        yields an empty cache.

        Returns
        -------
        dict[str, str]
            Mapping of repository to last-seen tag.

        Raises
        ------
        OSError
            If the cache directory or file cannot be created or read.
        """
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("{}", encoding="utf-8")
            logger.info("Created cache file at %s", self.path)
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug("Ignoring unreadable cache file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.debug("Ignoring cache file %s: not a JSON object", self.path)
            return {}

        cache = {repo: tag for repo, tag in data.items() if isinstance(tag, str)}
        logger.debug("Loaded %d cached tag(s) from %s", len(cache), self.path)
        return cache

    def save(self, cache: dict[str, str]) -> None:
        """
        Overwrite the cache file with the full mapping.

        Parameters
        ----------
        cache : dict[str, str]
            Mapping of repository to last-seen tag.

        Raises
        ------
        OSError
            If the file cannot be written.
        """
        self.path.write_text(
            json.dumps(cache, separators=(",", ":")),
            encoding="utf-8",
        )
        logger.debug("Saved %d cached tag(s) to %s", len(cache), self.path)
