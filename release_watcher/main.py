"""
Main entry point for Release Watcher.

Runs the async poll loop that checks repositories for new releases
and sends desktop notifications.
"""

import argparse
import asyncio
import logging
import signal
import sys
from urllib.parse import urlparse

import coloredlogs
import yaml

from release_watcher import __version__
from release_watcher.config import AppConfig, build_config
from release_watcher.desktop import DesktopNotifier, NotifyError
from release_watcher.github import FetchError, ReleaseFetcher
from release_watcher.notifier import Notifier
from release_watcher.storage import CacheStore

logger = logging.getLogger(__name__)


def redact_proxy_url(proxy_url: str) -> str:
    """
    Redact credentials from a proxy URL for safe logging.

    Parameters
    ----------
    proxy_url : str
        The proxy URL potentially containing credentials.

    Returns
    -------
    str
        The proxy URL with password redacted.
    """
    try:
        parsed = urlparse(proxy_url)
        if parsed.password:
            netloc = parsed.hostname or ""
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            if parsed.username:
                netloc = f"{parsed.username}:****@{netloc}"
            return f"{parsed.scheme}://{netloc}{parsed.path}"
        return proxy_url
    except ValueError:
        return "<proxy url>"


class ReleaseWatcher:
    """
    Main release watcher application.

    Coordinates release fetching, the tag cache, and notifications.
    The poll loop races a shutdown task; whichever finishes first
    ends the run.
    """

    def __init__(
        self,
        config: AppConfig,
        store: CacheStore | None = None,
        fetcher: ReleaseFetcher | None = None,
        notifier: Notifier | None = None,
    ):
        """
        Initialize the release watcher.

        Parameters
        ----------
        config : AppConfig
            Validated application configuration.
        store : CacheStore | None
            Tag cache. Built from ``config.storage`` when None.
        fetcher : ReleaseFetcher | None
            GitHub client. Built from ``config.github`` when None.
        notifier : Notifier | None
            Notification backend. A DesktopNotifier when None.
        """
        self.config = config
        self.store = store or CacheStore(
            config.storage.cache_file, config.storage.cache_dir
        )
        self.fetcher = fetcher or ReleaseFetcher(
            api_url=config.github.api_url,
            timeout=config.github.request_timeout,
            user_agent=config.github.user_agent,
            proxy_url=config.github.proxy,
        )
        self.notifier = notifier or DesktopNotifier(config.notification)
        self._stop_event = asyncio.Event()
        self._tasks: list[asyncio.Task] = []

    async def start(self, once: bool = False) -> None:
        """
        Load the cache and run the poll loop until stopped.

        Parameters
        ----------
        once : bool
            Run a single cycle and return.

        Raises
        ------
        OSError
            If the cache file cannot be created or read.
        """
        logger.info("Starting Release Watcher")

        cache = self.store.load()
        logger.info("Using cache file %s", self.store.path)

        if self.config.github.proxy:
            logger.info("Using proxy: %s", redact_proxy_url(self.config.github.proxy))

        logger.info(
            "Watching %d repositor%s: %s",
            len(self.config.repos),
            "y" if len(self.config.repos) == 1 else "ies",
            ", ".join(self.config.repos),
        )

        poll_task = asyncio.create_task(self._poll(cache, once))
        shutdown_task = asyncio.create_task(self._stop_event.wait())
        self._tasks = [poll_task, shutdown_task]

        done, pending = await asyncio.wait(
            self._tasks, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks = []

        if poll_task in done:
            # Surface unexpected errors from the loop
            poll_task.result()
        else:
            logger.info("Poll loop interrupted")

    def request_stop(self) -> None:
        """Ask the poll loop to end. Safe to call from a signal handler."""
        self._stop_event.set()

    async def stop(self) -> None:
        """Stop the release watcher and release resources."""
        logger.info("Stopping Release Watcher")
        self.request_stop()

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []

        await self.fetcher.close()
        logger.info("Release Watcher stopped")

    async def _poll(self, cache: dict[str, str], once: bool) -> dict[str, str]:
        """
        Run poll cycles until stopped.

        Parameters
        ----------
        cache : dict[str, str]
            Tag cache loaded at startup.
        once : bool
            Return after the first cycle.

        Returns
        -------
        dict[str, str]
            The cache after the last completed cycle.
        """
        interval = self.config.polling.check_interval

        while not self._stop_event.is_set():
            cache, _ = await self.run_cycle(cache)
            if once:
                break
            logger.debug("Next check in %s seconds", interval)
            await self._wait(interval)

        return cache

    async def run_cycle(
        self, cache: dict[str, str]
    ) -> tuple[dict[str, str], dict[str, str]]:
        """
        Check every repository once, notify, and persist the cache.

        Parameters
        ----------
        cache : dict[str, str]
            Tag cache before the cycle. Left untouched.

        Returns
        -------
        tuple[dict[str, str], dict[str, str]]
            The updated cache and the change set of this cycle.
        """
        polling = self.config.polling
        cache = dict(cache)
        changes: dict[str, str] = {}

        logger.info("Checking for new releases")

        for repo in self.config.repos:
            await self._wait(polling.request_delay)

            try:
                tag = await self.fetcher.fetch_latest_tag(repo)
            except FetchError as e:
                logger.error("Error checking releases of %s: %s", repo, e)
                await self._wait(polling.error_delay)
                continue

            if tag is None:
                continue

            logger.info("%s: %s", repo, tag)
            previous = cache.get(repo)
            if previous is not None and previous != tag:
                logger.info("New release for %s: %s -> %s", repo, previous, tag)
                changes[repo] = tag
            cache[repo] = tag

        if changes:
            try:
                await self.notifier.notify(changes)
            except NotifyError as e:
                logger.error("Failed to notify: %s", e)

        try:
            self.store.save(cache)
        except OSError as e:
            logger.error("Error writing cache file: %s", e)

        return cache, changes

    async def _wait(self, delay: float) -> None:
        """
        Sleep for ``delay`` seconds or until a stop is requested.

        Parameters
        ----------
        delay : float
            Maximum time to wait, in seconds.
        """
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass


def setup_logging(verbose: bool = False) -> None:
    """
    Configure application logging.

    Parameters
    ----------
    verbose : bool
        If True, set log level to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.INFO

    coloredlogs.install(
        level=level,
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("plyer").setLevel(logging.WARNING)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="release-watcher",
        description="Watch GitHub repositories for new releases",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-r",
        "--repos",
        help="Repositories to check (owner/name), separated by commas",
    )
    parser.add_argument(
        "-c",
        "--cache-file",
        default=None,
        help="Cache file name (default: github-release.txt)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional path to a YAML configuration file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single check and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_arg_parser().parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = build_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    watcher = ReleaseWatcher(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler():
        logger.info("Received shutdown signal")
        watcher.request_stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    exit_code = 0
    try:
        loop.run_until_complete(watcher.start(once=args.once))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except OSError as e:
        logger.error("Cannot use cache file: %s", e)
        exit_code = 1
    finally:
        loop.run_until_complete(watcher.stop())
        loop.close()

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
