"""
Broadcast Time Request Server

HTTP/JSON front end for the reconciliation engine. Each service method
takes a JSON object and answers with a JSON reply carrying "returnValue".

Endpoints:
    POST /time/setBroadcastTime           {"utc": int, "local": int}
    POST /time/getBroadcastTime           {}
    POST /time/getEffectiveBroadcastTime  {}
    GET  /health                          Basic health check (200 OK if running)
    GET  /status                          JSON engine status

The two getters also answer GET without a body.

Usage:
    from broadcast_time.output.time_server import TimeServer

    server = TimeServer(port=8089)
    server.set_engine(engine)
    server.start()
"""

import json
import logging
import socket
import threading
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any, Dict, Optional, Tuple

from ..interfaces.time_result import ErrorCode, error_reply, success_reply
from ..timing.local_time import timezone_name
from ..timing.time_width import TimeRangeError, to_time_t

logger = logging.getLogger(__name__)


SET_BROADCAST_TIME = '/time/setBroadcastTime'
GET_BROADCAST_TIME = '/time/getBroadcastTime'
GET_EFFECTIVE_BROADCAST_TIME = '/time/getEffectiveBroadcastTime'

# Largest request body accepted (bytes)
MAX_REQUEST_SIZE = 64 * 1024

# Seconds a client may stall while sending a request
REQUEST_TIMEOUT = 5.0


class RequestError(ValueError):
    """Request body failed validation."""


def parse_set_broadcast_time(request: Dict[str, Any]) -> Tuple[int, int]:
    """
    Validate a setBroadcastTime request.

    Both "utc" and "local" are required integers that fit the native
    time_t; no other properties are allowed.

    Returns:
        (utc, local)

    Raises:
        RequestError: if the request is invalid
    """
    extra = sorted(set(request) - {'utc', 'local'})
    if extra:
        raise RequestError(f"Unexpected properties: {', '.join(extra)}")

    values = []
    for key in ('utc', 'local'):
        if key not in request:
            raise RequestError(f"Missing required property: {key}")
        try:
            values.append(to_time_t(request[key]))
        except (TypeError, TimeRangeError) as e:
            raise RequestError(f"Invalid '{key}': {e}") from e
    return values[0], values[1]


def parse_empty_request(request: Dict[str, Any]):
    """Validate a request that takes no parameters."""
    if request:
        raise RequestError(f"Unexpected properties: {', '.join(sorted(request))}")


class TimeHTTPServer(HTTPServer):
    """HTTPServer carrying the engine its handlers talk to."""

    def __init__(self, server_address, handler_class, engine=None,
                 request_timeout: float = REQUEST_TIMEOUT):
        super().__init__(server_address, handler_class)
        self.engine = engine
        self.request_timeout = request_timeout


class TimeRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for broadcast time methods."""

    def setup(self):
        # Per-connection socket timeout
        self.timeout = self.server.request_timeout
        super().setup()

    def log_message(self, format, *args):
        """Route HTTP access logging to the module logger."""
        logger.debug(f"{self.address_string()} - {format % args}")

    @property
    def engine(self):
        return self.server.engine

    def do_GET(self):
        """Handle GET requests."""
        if self.path == '/health':
            self._handle_health()
        elif self.path == '/status':
            self._handle_status()
        elif self.path == GET_BROADCAST_TIME:
            self._dispatch(self._get_broadcast_time, {})
        elif self.path == GET_EFFECTIVE_BROADCAST_TIME:
            self._dispatch(self._get_effective_broadcast_time, {})
        elif self.path == SET_BROADCAST_TIME:
            self.send_error(405, "Method Not Allowed")
        else:
            self.send_error(404, "Not Found")

    def do_POST(self):
        """Handle POST requests."""
        methods = {
            SET_BROADCAST_TIME: self._set_broadcast_time,
            GET_BROADCAST_TIME: self._get_broadcast_time,
            GET_EFFECTIVE_BROADCAST_TIME: self._get_effective_broadcast_time,
        }
        method = methods.get(self.path)
        if method is None:
            self.send_error(404, "Not Found")
            return

        try:
            request = self._read_request()
        except RequestError as e:
            self._send_json(400, error_reply(ErrorCode.INVALID_REQUEST, str(e)))
            return

        self._dispatch(method, request)

    def _read_request(self) -> Dict[str, Any]:
        """Read and decode the JSON request body (empty body = {})."""
        try:
            length = int(self.headers.get('Content-Length') or 0)
        except ValueError as e:
            raise RequestError("Invalid Content-Length") from e
        if length > MAX_REQUEST_SIZE:
            raise RequestError("Request too large")

        try:
            body = self.rfile.read(length) if length > 0 else b''
        except socket.timeout as e:
            self.close_connection = True
            raise RequestError("Timed out reading request body") from e
        if len(body) < length:
            self.close_connection = True
            raise RequestError("Truncated request body")
        if not body.strip():
            return {}

        try:
            request = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RequestError(f"Invalid JSON: {e}") from e
        if not isinstance(request, dict):
            raise RequestError("Request must be a JSON object")
        return request

    def _dispatch(self, method, request: Dict[str, Any]):
        """Run a service method and send its reply."""
        if self.engine is None:
            self._send_json(503, {'error': 'No engine connected'})
            return

        try:
            reply = method(request)
        except RequestError as e:
            logger.info(f"{self.path}: invalid request: {e}")
            self._send_json(400, error_reply(ErrorCode.INVALID_REQUEST, str(e)))
            return
        except TimeRangeError as e:
            # Stored values that the native width cannot carry back out
            logger.critical(f"{self.path}: failed to encode reply: {e}")
            self._send_json(500, {'error': str(e)})
            return

        self._send_json(200, reply)

    def _set_broadcast_time(self, request: Dict[str, Any]) -> Dict[str, Any]:
        utc, local = parse_set_broadcast_time(request)
        self.engine.set_broadcast_time(utc, local)
        return success_reply()

    def _get_broadcast_time(self, request: Dict[str, Any]) -> Dict[str, Any]:
        parse_empty_request(request)
        pair = self.engine.get_broadcast_time()
        if pair is None:
            return error_reply(ErrorCode.NOT_AVAILABLE)
        return success_reply(**pair.to_dict())

    def _get_effective_broadcast_time(self, request: Dict[str, Any]) -> Dict[str, Any]:
        parse_empty_request(request)
        effective = self.engine.get_effective_time()
        if effective is None:
            return error_reply(ErrorCode.COMPUTE_FAILURE)
        return success_reply(**effective.to_dict())

    def _handle_health(self):
        """Basic health check - returns 200 if server is running."""
        self.send_response(200)
        self.send_header('Content-Type', 'text/plain')
        self.end_headers()
        self.wfile.write(b'OK\n')

    def _handle_status(self):
        """Return JSON status of the engine."""
        if self.engine is None:
            self._send_json(503, {'error': 'No engine connected'})
            return
        try:
            status = self.engine.get_status()
            status['timezone'] = timezone_name(self.engine.tz)
        except Exception as e:
            logger.exception(f"Failed to build status: {e}")
            self._send_json(500, {'error': str(e)})
            return
        self._send_json(200, status)

    def _send_json(self, code: int, data: Dict[str, Any]):
        body = json.dumps(data).encode()
        self.send_response(code)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class TimeServer:
    """
    HTTP server for broadcast time requests.

    Runs in a background thread. HTTPServer handles one request at a time,
    so requests are serialized.
    """

    def __init__(
        self,
        port: int = 8089,
        bind_address: str = '127.0.0.1',
        request_timeout: float = REQUEST_TIMEOUT
    ):
        """
        Initialize the time server.

        Args:
            port: HTTP port to listen on (0 = pick a free port on start)
            bind_address: Address to bind to (default: loopback only)
            request_timeout: Seconds to wait on a stalled client before
                             dropping its request
        """
        self.port = port
        self.bind_address = bind_address
        self.request_timeout = request_timeout
        self.server: Optional[TimeHTTPServer] = None
        self.thread: Optional[threading.Thread] = None
        self.engine = None
        self._running = False

    def set_engine(self, engine):
        """
        Connect the reconciliation engine that answers requests.

        Args:
            engine: TimeReconciliationEngine instance
        """
        self.engine = engine
        if self.server:
            self.server.engine = engine

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """
        Start the server in a background thread.

        Raises:
            OSError: if the address cannot be bound
        """
        if self._running:
            logger.warning("Time server already running")
            return

        self.server = TimeHTTPServer(
            (self.bind_address, self.port),
            TimeRequestHandler,
            engine=self.engine,
            request_timeout=self.request_timeout
        )
        self.port = self.server.server_address[1]
        self._running = True

        self.thread = threading.Thread(
            target=self.server.serve_forever,
            kwargs={'poll_interval': 0.5},
            name="TimeServer",
            daemon=True
        )
        self.thread.start()

        logger.info(f"Time server started on http://{self.bind_address}:{self.port}")
        logger.info(f"  POST {SET_BROADCAST_TIME}")
        logger.info(f"  POST {GET_BROADCAST_TIME}")
        logger.info(f"  POST {GET_EFFECTIVE_BROADCAST_TIME}")
        logger.info("  GET  /health, /status")

    def stop(self):
        """Stop the server."""
        if not self._running:
            return
        self._running = False
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.server = None
        if self.thread:
            self.thread.join(timeout=2.0)
            self.thread = None
        logger.info("Time server stopped")
