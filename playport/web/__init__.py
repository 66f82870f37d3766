"""HTTP front end package."""
from .server import PlayPortServer, create_server, serve_in_thread

__all__ = ["PlayPortServer", "create_server", "serve_in_thread"]
