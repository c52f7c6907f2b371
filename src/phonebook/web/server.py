"""
Web Server - FastAPI-based JSON API for the phonebook.

Serves the contacts REST API, an /info page and, when present, the built
front end as static files.
"""

import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from loguru import logger
from pydantic import ValidationError as SchemaError
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from phonebook import __version__
from phonebook.contacts.errors import DuplicateNameError, NotFoundError, ValidationError
from phonebook.contacts.store import ContactStore
from phonebook.contacts.validation import validate_contact
from phonebook.web.schemas import ContactIn, ContactOut, ErrorBody


MISSING_FIELDS = "name or number missing"
MALFORMATTED_BODY = "malformatted request body"
DUPLICATE_NAME = "name must be unique"
CONTACT_NOT_FOUND = "contact not found"
UNKNOWN_ENDPOINT = "unknown endpoint"
INTERNAL_ERROR = "internal server error"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(ErrorBody(error=message).model_dump(), status_code=status_code)


class WebServer:
    """
    FastAPI web server for the phonebook.

    The contact store is injected; `start()` opens it before serving and
    closes it once the server exits.
    """

    def __init__(
        self,
        store: ContactStore,
        host: str = "127.0.0.1",
        port: int = 3001,
        cors_origins: Optional[List[str]] = None,
        static_dir: Optional[str] = None,
    ):
        self.store = store
        self.host = host
        self.port = port
        self.static_dir = Path(static_dir) if static_dir else None

        self.fastapi = FastAPI(
            title="Phonebook",
            description="Contacts REST API",
            version=__version__,
        )
        self._setup_middleware(cors_origins if cors_origins is not None else ["*"])
        self._setup_exception_handlers()
        self._setup_routes()
        self._mount_static()

    def _setup_middleware(self, cors_origins: List[str]):
        self.fastapi.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @self.fastapi.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.info(f"{request.method} {request.url.path} 500 - - {elapsed_ms:.3f} ms")
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000
            length = response.headers.get("content-length", "-")
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} {length} - {elapsed_ms:.3f} ms"
            )
            return response

    def _setup_exception_handlers(self):
        @self.fastapi.exception_handler(StarletteHTTPException)
        async def http_error(request: Request, exc: StarletteHTTPException):
            if exc.status_code == 404:
                return _error(UNKNOWN_ENDPOINT, 404)
            return _error(str(exc.detail), exc.status_code)

        @self.fastapi.exception_handler(Exception)
        async def unexpected_error(request: Request, exc: Exception):
            logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
            return _error(INTERNAL_ERROR, 500)

    def _setup_routes(self):
        """Set up FastAPI routes."""

        @self.fastapi.get("/info", response_class=HTMLResponse)
        async def info():
            """Contact count and server time."""
            count = await self.store.count()
            stamp = datetime.now().astimezone().strftime("%a %b %d %Y %H:%M:%S GMT%z (%Z)")
            return HTMLResponse(
                content=f"<p>Phonebook has info for {count} people</p><p>{stamp}</p>"
            )

        @self.fastapi.get("/api/contacts", response_model=List[ContactOut])
        async def list_contacts():
            contacts = await self.store.list_all()
            return [ContactOut.from_contact(c) for c in contacts]

        @self.fastapi.get("/api/contacts/{contact_id}", response_model=ContactOut)
        async def get_contact(contact_id: str):
            contact = await self.store.get_by_id(contact_id)
            if contact is None:
                return Response(status_code=404)
            return ContactOut.from_contact(contact)

        @self.fastapi.post("/api/contacts", response_model=ContactOut)
        async def create_contact(request: Request):
            body, problem = await self._parse_contact_body(request)
            if problem is not None:
                return _error(problem.error, 400)

            try:
                contact = await self.store.create(body.name, body.number)
            except DuplicateNameError:
                return _error(DUPLICATE_NAME, 400)
            except ValidationError as e:
                return _error(str(e), 400)

            logger.info(f"Added contact {contact.name}")
            return ContactOut.from_contact(contact)

        @self.fastapi.put("/api/contacts/{contact_id}", response_model=ContactOut)
        async def update_contact(contact_id: str, request: Request):
            body, problem = await self._parse_contact_body(request)
            if problem is not None:
                return _error(problem.error, 400)

            try:
                contact = await self.store.update_by_id(contact_id, body.name, body.number)
            except NotFoundError:
                return _error(CONTACT_NOT_FOUND, 404)
            except DuplicateNameError:
                return _error(DUPLICATE_NAME, 400)
            except ValidationError as e:
                return _error(str(e), 400)

            return ContactOut.from_contact(contact)

        @self.fastapi.delete("/api/contacts/{contact_id}", status_code=204)
        async def delete_contact(contact_id: str):
            removed = await self.store.delete_by_id(contact_id)
            if not removed:
                logger.debug(f"Delete of unknown contact {contact_id} ignored")
            return Response(status_code=204)

    def _mount_static(self):
        # Mounted last so the API routes take precedence over "/"
        if self.static_dir is None:
            return
        if self.static_dir.is_dir():
            self.fastapi.mount("/", StaticFiles(directory=str(self.static_dir), html=True), name="static")
            logger.info(f"Mounted static files from: {self.static_dir}")
        else:
            logger.debug(f"Static directory not found: {self.static_dir}")

    async def _parse_contact_body(self, request: Request) -> Tuple[Optional[ContactIn], Optional[ErrorBody]]:
        """
        Parse and check a contact request body before any store call.

        Returns (body, None) on success or (None, ErrorBody) describing why
        the request must be rejected with 400.
        """
        try:
            data = await request.json()
            body = ContactIn.model_validate(data)
        except (ValueError, SchemaError):
            return None, ErrorBody(error=MALFORMATTED_BODY)

        logger.debug(f"{request.method} {request.url.path} body={data}")

        if not body.is_complete:
            return None, ErrorBody(error=MISSING_FIELDS)

        field_errors = validate_contact(body.name, body.number)
        if field_errors:
            return None, ErrorBody(error="; ".join(e.message for e in field_errors))

        return body, None

    async def start(self):
        """Open the store and start the web server."""
        await self.store.initialize()
        config = uvicorn.Config(
            self.fastapi,
            host=self.host,
            port=self.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)

        logger.info(f"Phonebook server running on http://{self.host}:{self.port}")
        try:
            await server.serve()
        finally:
            await self.store.shutdown()
