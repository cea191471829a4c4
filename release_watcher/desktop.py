"""
Desktop notification client.

Shows one notification per poll cycle through the host's
notification service using plyer.
"""

import asyncio
import logging

from plyer import notification

from release_watcher.config import NotificationConfig
from release_watcher.notifier import format_changes

logger = logging.getLogger(__name__)


class NotifyError(Exception):
    """The desktop notification could not be displayed."""


class DesktopNotifier:
    """
    Desktop notification backend.

    Batches every change of a cycle into a single notification.
    """

    def __init__(self, config: NotificationConfig | None = None):
        """
        Initialize the desktop notifier.

        Parameters
        ----------
        config : NotificationConfig | None
            Title, icon and display settings. Defaults apply when None.
        """
        self.config = config or NotificationConfig()

    async def notify(self, changes: dict[str, str]) -> None:
        """
        Display one notification listing every changed repository.

        Parameters
        ----------
        changes : dict[str, str]
            Mapping of repository to its new tag.

        Raises
        ------
        NotifyError
            If the notification service rejected the request.
        """
        if not changes:
            return

        message = format_changes(changes)
        try:
            # plyer blocks on D-Bus / platform calls
            await asyncio.to_thread(self._show, message)
        except NotifyError:
            raise
        except Exception as e:
            raise NotifyError(f"Failed to display notification: {e}") from e

        logger.info(
            "Sent notification for %d repositor%s",
            len(changes),
            "y" if len(changes) == 1 else "ies",
        )

    def _show(self, message: str) -> None:
        """Hand the notification to plyer."""
        try:
            notification.notify(
                title=self.config.title,
                message=message,
                app_name=self.config.app_name,
                app_icon=self.config.icon,
                timeout=self.config.timeout,
            )
        except NotImplementedError as e:
            raise NotifyError("No desktop notification backend available") from e
