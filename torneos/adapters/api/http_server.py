"""HTTP server adapter for the torneos API.

Provides a simple HTTP server using Python's built-in http.server module,
bridging each request onto the asyncio event loop where the handlers and
stores live.

Supports optional API key authentication via the Authorization header
(Bearer token) or X-API-Key. ``GET /health`` is always public.
"""

import asyncio
import hmac
import json
import logging
import re
import uuid
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Coroutine
from urllib.parse import parse_qs, urlsplit

from .handlers import TorneoApiHandlers
from .responses import CORS_HEADERS, ApiResponse, respuesta_error

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 1024 * 1024
REQUEST_TIMEOUT_SECONDS = 30

_RUTA_TORNEOS = re.compile(r"/api/torneos/?")
_RUTA_TORNEO = re.compile(r"/api/torneos/([^/]+)/?")
_RUTA_CATEGORIAS = re.compile(r"/api/categorias/?")


def make_api_handler(
    handlers: TorneoApiHandlers,
    event_loop: asyncio.AbstractEventLoop,
    api_key: str | None,
    require_auth: bool,
) -> type[BaseHTTPRequestHandler]:
    """Factory to create an ApiHTTPHandler class with instance-specific state.

    Dependencies are captured in the closure instead of class-level
    mutable state, so several servers can run in one process.

    Args:
        handlers: TorneoApiHandlers that implement the endpoints.
        event_loop: Event loop the handlers must run on.
        api_key: Optional API key for authentication.
        require_auth: Whether authentication is required.

    Returns:
        An ApiHTTPHandler class configured with the provided dependencies.
    """

    class ApiHTTPHandler(BaseHTTPRequestHandler):
        """HTTP request handler for the torneos API."""

        def _check_auth(self) -> bool:
            """Check if request is authenticated.

            Supports two authentication methods:
            1. Authorization: Bearer <api_key>
            2. X-API-Key: <api_key>

            Returns:
                True if authenticated or auth not required, False otherwise.
            """
            if not require_auth:
                return True

            if not api_key:
                return False

            auth_header = self.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                provided_key = auth_header[7:]
                return hmac.compare_digest(provided_key, api_key)

            api_key_header = self.headers.get("X-API-Key", "")
            if api_key_header:
                return hmac.compare_digest(api_key_header, api_key)

            return False

        def do_GET(self) -> None:
            self._dispatch("GET")

        def do_POST(self) -> None:
            self._dispatch("POST")

        def do_PUT(self) -> None:
            self._dispatch("PUT")

        def do_DELETE(self) -> None:
            self._dispatch("DELETE")

        def do_OPTIONS(self) -> None:
            """CORS preflight. Public, no body."""
            self.send_response(204)
            for name, value in CORS_HEADERS.items():
                self.send_header(name, value)
            self.end_headers()

        def _dispatch(self, method: str) -> None:
            request_id = self.headers.get("X-Request-Id") or str(uuid.uuid4())
            url = urlsplit(self.path)
            path = url.path

            if method == "GET" and path == "/health":
                self._send_json(200, {"status": "healthy"})
                return

            if not self._check_auth():
                self._send_api_response(
                    respuesta_error(
                        401,
                        "Token de acceso inválido o expirado",
                        request_id,
                        {"type": "UNAUTHORIZED"},
                    )
                )
                return

            body: Any = {}
            if method in ("POST", "PUT", "DELETE"):
                leido = self._read_json_body(request_id)
                if leido is None:
                    return
                body = leido

            coro = self._route(method, path, url.query, body, request_id)
            if coro is None:
                self._send_api_response(
                    respuesta_error(404, f"Ruta {method} {path} no encontrada", request_id)
                )
                return

            self._run_async(coro, request_id)

        def _route(
            self,
            method: str,
            path: str,
            query_string: str,
            body: Any,
            request_id: str,
        ) -> Coroutine[Any, Any, ApiResponse] | None:
            """Map method and path to a handler coroutine, or None if unknown."""
            if _RUTA_TORNEOS.fullmatch(path):
                if method == "POST":
                    return handlers.crear_torneo(body, request_id)
                if method == "GET":
                    query = {k: v[-1] for k, v in parse_qs(query_string).items()}
                    return handlers.listar_torneos(query, request_id)
                return None

            match = _RUTA_TORNEO.fullmatch(path)
            if match:
                torneo_id = match.group(1)
                if method == "GET":
                    return handlers.obtener_torneo(torneo_id, request_id)
                if method == "PUT":
                    return handlers.actualizar_torneo(torneo_id, body, request_id)
                if method == "DELETE":
                    return handlers.cancelar_torneo(torneo_id, body, request_id)
                return None

            if _RUTA_CATEGORIAS.fullmatch(path) and method == "GET":
                return handlers.listar_categorias(request_id)

            return None

        def _read_json_body(self, request_id: str) -> Any | None:
            """Read and decode the JSON body; sends the error response itself.

            Returns:
                Decoded body ({} when empty), or None if a response was sent.
            """
            content_length = int(self.headers.get("Content-Length", 0))
            if content_length > MAX_BODY_SIZE:
                self._send_api_response(
                    respuesta_error(413, "Request body too large", request_id)
                )
                return None

            raw = self.rfile.read(content_length) if content_length > 0 else b""
            if not raw:
                return {}
            try:
                decoded = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                self._send_api_response(
                    respuesta_error(400, "Invalid JSON body", request_id)
                )
                return None
            return {} if decoded is None else decoded

        def _run_async(
            self, coro: Coroutine[Any, Any, ApiResponse], request_id: str
        ) -> None:
            """Run a handler coroutine on the event loop and send its response."""
            future = asyncio.run_coroutine_threadsafe(coro, event_loop)
            try:
                response = future.result(timeout=REQUEST_TIMEOUT_SECONDS)
            except Exception as e:
                future.cancel()
                logger.error(f"Error handling API request: {e}", exc_info=True)
                response = respuesta_error(500, "Error interno del servidor", request_id)
            self._send_api_response(response)

        def _send_api_response(self, response: ApiResponse) -> None:
            self._send_json(response.status, response.body, response.headers)

        def _send_json(
            self,
            status: int,
            data: dict[str, Any],
            headers: dict[str, str] | None = None,
        ) -> None:
            """Send JSON response."""
            payload = json.dumps(data, ensure_ascii=False).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Content-Length", str(len(payload)))
            for name, value in (headers or {}).items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return ApiHTTPHandler


class ApiHTTPServer:
    """HTTP server adapter for the torneos API.

    Optionally requires API key authentication for every endpoint except
    the health check.
    """

    def __init__(
        self,
        handlers: TorneoApiHandlers,
        host: str = "0.0.0.0",
        port: int = 8080,
        api_key: str | None = None,
        require_auth: bool = False,
    ):
        """Initialize the HTTP server.

        Args:
            handlers: TorneoApiHandlers instance to handle requests.
            host: Host to listen on (default 0.0.0.0).
            port: Port to listen on (default 8080). 0 picks a free port,
                available as ``port`` once started.
            api_key: Optional API key for authentication.
            require_auth: Whether to require authentication (default False).
                If True, api_key must be provided.

        Raises:
            ValueError: If require_auth is True but no api_key is given.
        """
        if require_auth and not api_key:
            raise ValueError(
                "Invalid auth configuration: require_auth=True but no API key provided"
            )

        self.handlers = handlers
        self.host = host
        self.port = port
        self.api_key = api_key
        self.require_auth = require_auth
        self.server: HTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the HTTP server."""
        handler_class = make_api_handler(
            handlers=self.handlers,
            event_loop=asyncio.get_running_loop(),
            api_key=self.api_key,
            require_auth=self.require_auth,
        )

        self.server = HTTPServer((self.host, self.port), handler_class)
        self.port = self.server.server_address[1]

        # serve_forever blocks, so it runs in a worker thread
        self._server_task = asyncio.create_task(self._run_server())

        if self.require_auth:
            logger.info(
                f"API HTTP server listening on {self.host}:{self.port} "
                "(with API key authentication)"
            )
        else:
            logger.info(f"API HTTP server listening on {self.host}:{self.port}")

    async def _run_server(self) -> None:
        """Run the HTTP server loop in a thread pool."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"API HTTP server error: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            await asyncio.to_thread(self.server.shutdown)
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("API HTTP server stopped")
