"""FastAPI application for the notevault local JSON API.

The server never holds the vault key: each request carries it in the
``X-Vault-Key`` header and a session lives only for that request. Handlers
are ``async def`` without awaits, so vault cycles run one at a time on the
event loop.
"""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .. import __version__
from ..core.errors import ErrorKind, InvalidKeyFormat, VaultError

STATUS_BY_KIND = {
    ErrorKind.INVALID_KEY_FORMAT: 400,
    ErrorKind.DECRYPTION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VAULT_EXISTS: 409,
    ErrorKind.IO: 500,
    ErrorKind.SCHEMA: 500,
    ErrorKind.CLOSED: 500,
}


class NoteIn(BaseModel):
    title: str
    content: str = ""


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with vault path and config
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="notevault API",
        description="Local JSON API for an encrypted note vault",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(VaultError)
    async def vault_error_handler(request: Request, exc: VaultError) -> JSONResponse:
        return JSONResponse(
            status_code=STATUS_BY_KIND.get(exc.kind, 500),
            content={"error": exc.kind.value, "detail": exc.message},
        )

    # Security setup
    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or not secrets.compare_digest(credentials.credentials, token):
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    async def vault_key(x_vault_key: str = Header(..., alias="X-Vault-Key")) -> str:  # noqa: B008
        if not x_vault_key:
            raise InvalidKeyFormat("empty X-Vault-Key header")
        return x_vault_key

    @app.get("/health")  # type: ignore[misc]
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "vault_exists": runtime.vault_path.exists()}

    @app.post("/vault", status_code=201)  # type: ignore[misc]
    async def create_vault(
        key: str = Depends(vault_key), auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Create an empty vault at the configured path."""
        with runtime.session_for_key(key) as session:
            session.create()
        return {"path": str(runtime.vault_path)}

    @app.get("/notes")  # type: ignore[misc]
    async def list_notes(
        q: str | None = None,
        key: str = Depends(vault_key),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """List visible notes, optionally filtered by substring."""
        with runtime.session_for_key(key) as session:
            notes = session.search(q) if q else session.open()
        return [{"id": n.id, "title": n.title} for n in notes]

    @app.get("/notes/{note_id}")  # type: ignore[misc]
    async def get_note(
        note_id: int, key: str = Depends(vault_key), auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Get note title and content."""
        with runtime.session_for_key(key) as session:
            note = session.read_note(note_id)
        return {"id": note.id, "title": note.title, "content": note.content}

    @app.post("/notes", status_code=201)  # type: ignore[misc]
    async def add_note(
        body: NoteIn, key: str = Depends(vault_key), auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        with runtime.session_for_key(key) as session:
            nid = session.add_note(body.title, body.content)
        return {"id": nid}

    @app.put("/notes/{note_id}")  # type: ignore[misc]
    async def save_note(
        note_id: int,
        body: NoteIn,
        key: str = Depends(vault_key),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        with runtime.session_for_key(key) as session:
            session.save_note(note_id, body.title, body.content)
        return {"id": note_id}

    @app.delete("/notes/{note_id}")  # type: ignore[misc]
    async def delete_note(
        note_id: int, key: str = Depends(vault_key), auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Hide a note."""
        with runtime.session_for_key(key) as session:
            session.delete_note(note_id)
        return {"id": note_id, "hidden": True}

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
