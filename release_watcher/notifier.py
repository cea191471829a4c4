"""
Protocol definition for notification backends.

Defines the common interface that all notifiers must implement.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """
    Protocol defining the interface for notification backends.

    The @runtime_checkable decorator allows using isinstance() checks
    against this protocol for structural typing validation.
    """

    async def notify(self, changes: dict[str, str]) -> None:
        """
        Announce the repositories whose release tag changed.

        Parameters
        ----------
        changes : dict[str, str]
            Mapping of repository to its new tag, for one poll cycle.

        Raises
        ------
        NotifyError
            If the notification could not be displayed.
        """
        ...


def format_changes(changes: dict[str, str]) -> str:
    """
    Render a change set as one ``repo: tag`` line per repository.

    Parameters
    ----------
    changes : dict[str, str]
        Mapping of repository to its new tag.

    Returns
    -------
    str
        Newline-terminated lines in change set order.
    """
    return "".join(f"{repo}: {tag}\n" for repo, tag in changes.items())
