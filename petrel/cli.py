"""
petrel/cli.py — Command-line interface for the petrel file server.
Provides the server entry point, logging setup and auto-reload support.
"""
import argparse
import sys
import os
import signal
import time
import logging
import subprocess
from pathlib import Path
from typing import Optional

from petrel import __version__
from petrel.colors import (
    ColorFormatter,
    format_banner_line,
    format_banner_separator,
    format_banner_tag,
    format_banner_title,
)
from petrel.server import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_WORKERS,
    Server,
    ServerConfig,
)

# Valid log level names (for CLI validation)
LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

log = logging.getLogger("petrel")


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a colored stdout handler to the petrel logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(show_timestamp=level <= logging.DEBUG))
    logger = logging.getLogger("petrel")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger


# Reload Watcher using watchdog

class ReloadManager:
    """
    Runs the server in a subprocess and restarts it when Python files change.

    Uses watchdog to monitor .py files in the current working directory,
    skipping caches, VCS metadata and virtual environments.
    """

    EXCLUDE_PATTERNS = {
        "__pycache__",
        ".git",
        ".svn",
        ".hg",
        "venv",
        ".venv",
        "env",
        ".env",
        "node_modules",
        ".tox",
        ".eggs",
        "*.egg-info",
        "dist",
        "build",
        ".mypy_cache",
        ".pytest_cache",
    }

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.process: Optional[subprocess.Popen] = None
        self.should_exit = False
        self.observer = None

    def _should_watch_path(self, path: str) -> bool:
        """Check if a path should be watched (not in excluded directories)."""
        for part in Path(path).parts:
            if part in self.EXCLUDE_PATTERNS:
                return False
            for pattern in self.EXCLUDE_PATTERNS:
                if "*" in pattern and part.endswith(pattern.replace("*", "")):
                    return False
        return True

    def _build_subprocess_args(self) -> list[str]:
        """Re-invoke this CLI without --reload."""
        args = [
            sys.executable, "-m", "petrel",
            "--host", self.args.host,
            "--port", str(self.args.port),
            "--workers", str(self.args.workers),
            "--log-level", self.args.log_level,
        ]
        if self.args.directory:
            args += ["--directory", self.args.directory]
        if self.args.contain_paths:
            args.append("--contain-paths")
        return args

    def start_server(self):
        log.info("Starting server subprocess...")
        self.process = subprocess.Popen(
            self._build_subprocess_args(),
            stdout=sys.stdout,
            stderr=sys.stderr,
        )

    def stop_server(self):
        if self.process and self.process.poll() is None:
            log.info("Stopping server subprocess...")
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                log.warning("Server did not stop gracefully, killing...")
                self.process.kill()
                self.process.wait()
            self.process = None

    def restart_server(self):
        log.info("Restarting server...")
        self.stop_server()
        # Let the port leave TIME_WAIT
        time.sleep(0.5)
        self.start_server()

    def run_with_reload(self):
        """Run the server with auto-reload enabled."""
        try:
            from watchdog.observers import Observer
            from watchdog.events import FileSystemEventHandler
        except ImportError:
            log.error(
                "watchdog package is required for --reload. "
                "Install it with: pip install petrel[reload]"
            )
            sys.exit(1)

        manager = self

        class PythonFileHandler(FileSystemEventHandler):
            """Triggers a restart on .py file changes."""

            def __init__(self):
                super().__init__()
                self.last_reload = 0.0
                self.debounce_seconds = 0.5

            def on_any_event(self, event):
                if event.is_directory:
                    return

                src_path = str(getattr(event, "src_path", ""))
                if not src_path.endswith(".py"):
                    return
                if not manager._should_watch_path(src_path):
                    return

                now = time.time()
                if now - self.last_reload < self.debounce_seconds:
                    return
                self.last_reload = now

                event_type = type(event).__name__.replace("Event", "").lower()
                log.info("Detected %s: %s", event_type, src_path)
                manager.restart_server()

        def signal_handler(signum, frame):
            log.info("Received shutdown signal")
            self.should_exit = True

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        watch_path = os.getcwd()
        self.observer = Observer()
        self.observer.schedule(PythonFileHandler(), watch_path, recursive=True)
        self.observer.start()

        log.info("Watching for file changes in: %s", watch_path)
        self.start_server()

        try:
            while not self.should_exit:
                if self.process and self.process.poll() is not None:
                    exit_code = self.process.returncode
                    if exit_code != 0:
                        log.warning("Server exited with code %d", exit_code)
                    # Wait for the next file change instead of restarting a crash loop
                    self.process = None
                time.sleep(0.5)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop_server()
            self.observer.stop()
            self.observer.join()
            log.info("Shutdown complete")


# Direct server runner (no reload)

def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        directory=args.directory,
        host=args.host,
        port=args.port,
        workers=args.workers,
        contain_paths=args.contain_paths,
    )


def run_server_direct(args: argparse.Namespace) -> int:
    """Run the server in the current process.  Returns the exit status."""
    server = Server(config_from_args(args))

    def signal_handler(signum, frame):
        log.info("Received shutdown signal")
        server.signal_exit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        server.serve()
    except OSError as e:
        log.error("Server error: %s", e)
        return 1
    except KeyboardInterrupt:
        log.info("Interrupted")
    finally:
        server.shutdown()
    return 0


# CLI Entry Point

def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="petrel",
        description="petrel - a small HTTP/1.1 echo and file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  petrel                                    Serve on 0.0.0.0:4221
  petrel --directory /tmp/files             Root /files/ at /tmp/files
  petrel --port 8080 --log-level debug      Custom port, verbose logs
  petrel --directory data --reload          Restart on code changes
        """,
    )

    parser.add_argument(
        "--directory",
        type=str,
        default="",
        help="Directory served and written by the /files/ routes "
             "(default: the working directory)",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=DEFAULT_HOST,
        help=f"Bind socket to this host (default: {DEFAULT_HOST})",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Bind socket to this port (default: {DEFAULT_PORT})",
    )

    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=DEFAULT_WORKERS,
        help=f"Number of connection worker threads (default: {DEFAULT_WORKERS})",
    )

    parser.add_argument(
        "--contain-paths",
        action="store_true",
        default=False,
        help="Reject file paths that resolve outside the served directory",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        default=False,
        help="Enable auto-reload on code changes (development mode)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=LOG_LEVELS.keys(),
        help="Set the log level (default: info)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def print_banner(args: argparse.Namespace):
    print(format_banner_title("petrel", __version__))
    print(format_banner_separator())
    print(format_banner_line("Address", f"http://{args.host}:{args.port}"))
    print(format_banner_line("Directory", args.directory or os.getcwd()))
    print(format_banner_line("Workers", str(args.workers)))
    if args.contain_paths:
        print(format_banner_line("Paths", format_banner_tag("contained")))
    if args.reload:
        print(format_banner_line("Reload", format_banner_tag("enabled")))
    print()


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(LOG_LEVELS[parsed_args.log_level])
    print_banner(parsed_args)

    if parsed_args.reload:
        ReloadManager(parsed_args).run_with_reload()
        return 0
    return run_server_direct(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
