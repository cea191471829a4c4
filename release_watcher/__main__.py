"""Allow running with ``python -m release_watcher``."""

from release_watcher.main import main

if __name__ == "__main__":
    main()
