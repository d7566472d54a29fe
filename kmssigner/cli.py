"""CLI entry point for kmssigner."""

import logging
import os
import sys
import tempfile

from .config import Config, get_config


def setup_logging(log_level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def setup_multiproc_metrics(config: Config) -> None:
    """Give all workers a shared prometheus_client directory.

    Must run before prometheus_client is imported anywhere in the process.
    """
    if not config.metrics_enabled or config.workers <= 1:
        return
    if not os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        os.environ["PROMETHEUS_MULTIPROC_DIR"] = tempfile.mkdtemp(prefix="kmssigner_metrics_")
    logging.getLogger(__name__).info(
        f"Multi-process metrics enabled (dir={os.environ['PROMETHEUS_MULTIPROC_DIR']})"
    )


def main() -> None:
    """Main entry point."""
    try:
        config = get_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.normalized_log_level)
    setup_multiproc_metrics(config)

    from .server import run_server

    try:
        run_server(config)
    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)
    except Exception:
        logging.getLogger(__name__).exception("Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
