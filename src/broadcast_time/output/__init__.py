"""Output adapters - HTTP/JSON request server for broadcast time methods."""

from .time_server import TimeServer, TimeRequestHandler, RequestError

__all__ = ['TimeServer', 'TimeRequestHandler', 'RequestError']
