"""
petrel — A small threaded HTTP/1.1 server.

Answers a fixed set of routes: a root ping, path echo, User-Agent echo,
file download from a configured directory or the working directory, and
file upload into the configured directory.
"""

__version__ = "0.1.0"
__all__ = ["serve", "run", "Server", "ServerConfig", "Dispatcher"]

from petrel.dispatcher import Dispatcher
from petrel.server import Server, ServerConfig, serve, run
