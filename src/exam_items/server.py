"""WebSocket server for Exam Items."""

import asyncio
import json
import logging
import uuid
from typing import Any, Callable, Optional

from websockets.asyncio.server import serve, ServerConnection

from .config.settings import Settings
from .listing import ItemListing
from .models import ExamItem, ExamItemChanges, OperationResult
from .repository import ExamItemRepository

logger = logging.getLogger(__name__)


class RequestError(Exception):
    """A malformed client request."""


def _reply(ok: bool, data: Any = None, error: Optional[str] = None) -> str:
    return json.dumps({"ok": ok, "data": data, "error": error})


def _result_reply(result: OperationResult) -> str:
    value = result.value
    if isinstance(value, ExamItem):
        value = value.to_dict()
    elif isinstance(value, list):
        value = [item.to_dict() for item in value]
    return _reply(result.ok and value is not None, value, result.reason)


def _require(request: dict, key: str) -> Any:
    value = request.get(key)
    if value in (None, ""):
        raise RequestError(f"Missing '{key}'")
    return value


def _require_id(request: dict) -> str:
    value = _require(request, "id")
    if not isinstance(value, str):
        raise RequestError("'id' must be a string")
    return value


def _require_object(request: dict, key: str) -> dict:
    value = _require(request, key)
    if not isinstance(value, dict):
        raise RequestError(f"'{key}' must be an object")
    return value


def _build(builder: Callable[[dict], Any], request: dict, key: str) -> Any:
    """Build a model from a request object, reporting bad field types."""
    try:
        return builder(_require_object(request, key))
    except ValueError as e:
        raise RequestError(str(e)) from None


class ExamItemsServer:
    """JSON-over-WebSocket command surface for authoring exam items.

    Each message is one JSON object with an ``action`` key; each reply is
    ``{"ok": bool, "data": ..., "error": str | null}``.
    """

    def __init__(self, settings: Settings, repository: ExamItemRepository):
        self.settings = settings
        self.repository = repository
        self.active_sessions: dict[str, ItemListing] = {}

    def _new_listing(self) -> ItemListing:
        return ItemListing(
            page_size=self.settings.listing.page_size,
            stem_preview_length=self.settings.listing.stem_preview_length,
        )

    async def handle_request(self, listing: ItemListing, message: str) -> str:
        """Process one request and return the JSON reply."""
        try:
            request = json.loads(message)
            if not isinstance(request, dict):
                raise RequestError("Request must be a JSON object")
            return await self._dispatch(listing, request)
        except json.JSONDecodeError as e:
            return _reply(False, error=f"Invalid JSON: {e.msg}")
        except RequestError as e:
            return _reply(False, error=str(e))

    async def _dispatch(self, listing: ItemListing, request: dict) -> str:
        repository = self.repository

        match request.get("action"):
            case "new":
                return _reply(True, ExamItem.blank().to_dict())
            case "list":
                return _result_reply(await repository.list_result())
            case "get":
                return _result_reply(await repository.get_result(_require_id(request)))
            case "create":
                item = _build(ExamItem.from_dict, request, "item")
                return _result_reply(await repository.create_result(item))
            case "update":
                changes = _build(ExamItemChanges.from_dict, request, "changes")
                return _result_reply(
                    await repository.update_result(_require_id(request), changes)
                )
            case "save":
                item = _build(ExamItem.from_dict, request, "item")
                return _result_reply(await repository.save_result(item))
            case "delete":
                result = await repository.delete_result(_require_id(request))
                return _reply(result.value, result.value, result.reason)
            case "page":
                return await self._page(listing, request)
            case "select":
                listing.toggle(_require_id(request))
                return _reply(True, sorted(listing.selected))
            case "delete_selected":
                failed = await listing.delete_selected(repository)
                return _reply(not failed, failed, "Some items could not be deleted" if failed else None)
            case action:
                raise RequestError(f"Unknown action: {action}")

    async def _page(self, listing: ItemListing, request: dict) -> str:
        if request.get("reload", True):
            await listing.load(self.repository)
        if "filter" in request:
            listing.set_filter(str(request["filter"] or ""))
        if "page" in request:
            try:
                listing.go_to(int(request["page"]))
            except (TypeError, ValueError):
                raise RequestError("'page' must be an integer") from None
        return _reply(True, {
            "rows": listing.summary_rows(),
            "page": listing.page,
            "pageCount": listing.page_count,
            "total": len(listing.filtered),
            "selected": sorted(listing.selected),
        })

    async def handle_connection(self, websocket: ServerConnection) -> None:
        """Handle a single WebSocket connection."""
        session_id = str(uuid.uuid4())
        listing = self._new_listing()
        self.active_sessions[session_id] = listing

        logger.info("[SESSION %s] Client connected", session_id[:8])

        try:
            async for message in websocket:
                logger.debug("[SESSION %s] Received request (%d chars)", session_id[:8], len(message))
                await websocket.send(await self.handle_request(listing, message))
        except Exception:
            logger.exception("[SESSION %s] Connection error", session_id[:8])
        finally:
            del self.active_sessions[session_id]
            logger.info("[SESSION %s] Disconnected", session_id[:8])

    async def _handle_health_check(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Answer /health once the server is up; the store pair is built before start()."""
        try:
            request = await reader.read(1024)
            if b"GET /health" in request or b"GET / " in request:
                response = (
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Type: application/json\r\n"
                    b"Content-Length: 15\r\n"
                    b"\r\n"
                    b'{"status":"ok"}'
                )
            else:
                response = (
                    b"HTTP/1.1 404 Not Found\r\n"
                    b"Content-Length: 0\r\n"
                    b"\r\n"
                )
            writer.write(response)
            await writer.drain()
        finally:
            writer.close()
            await writer.wait_closed()

    async def _start_health_server(self) -> asyncio.Server:
        """Start the HTTP health check server."""
        host = self.settings.server.host
        health_port = self.settings.server.health_port
        server = await asyncio.start_server(
            self._handle_health_check, host, health_port
        )
        logger.info("Health check running on http://%s:%s/health", host, health_port)
        return server

    async def start(self) -> None:
        """Start the WebSocket server and health check endpoint."""
        host = self.settings.server.host
        port = self.settings.server.port

        logger.info("Exam Items server on ws://%s:%s", host, port)

        health_server = await self._start_health_server()

        async with health_server, serve(self.handle_connection, host, port) as ws_server:
            await ws_server.serve_forever()
