"""FastAPI application exposing ingestion and context retrieval over HTTP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from workspace_rag.config import settings
from workspace_rag.errors import RetrievalError, StorageError, ValidationError
from workspace_rag.logging_config import configure_logging
from workspace_rag.models import UploadedFile
from workspace_rag.retrieval.engine import latest_user_message
from workspace_rag.serving.schemas import (
    ContextRequest,
    ContextResponse,
    DocumentResponseOut,
    FileDetailOut,
    FileErrorOut,
    MessageResponse,
    UploadResponse,
)
from workspace_rag.services import Services, build_services

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    """Return the app's services, building the default stack on first use."""
    if request.app.state.services is None:
        request.app.state.services = build_services(settings)
    return request.app.state.services


def create_app(services: Services | None = None) -> FastAPI:
    """Build the API.  Pass *services* to substitute collaborators (tests)."""
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if app.state.services is not None:
            app.state.services.close()

    app = FastAPI(
        title="Workspace RAG API",
        version="0.1.0",
        description="Upload documents into workspaces and fetch grounding context.",
        lifespan=lifespan,
    )
    app.state.services = services

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": exc.message})

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post("/documents", response_model=UploadResponse, response_model_exclude_none=True)
    async def add_documents(
        files: list[UploadFile] | None = File(default=None),
        namespace_id: str | None = Form(default=None, alias="namespaceId"),
        new_workspace: str = Form(default="false", alias="newWorkspace"),
        svc: Services = Depends(get_services),
    ) -> JSONResponse:
        """Ingest uploaded files into a workspace."""
        uploads = [
            UploadedFile(
                filename=f.filename or "upload",
                content_type=f.content_type or "application/octet-stream",
                data=await f.read(),
            )
            for f in files or []
        ]
        result = await svc.orchestrator.ingest(
            uploads, namespace_id, new_workspace=new_workspace.lower() == "true"
        )

        body = UploadResponse(
            message="Documents added successfully",
            namespace_id=result.namespace_id,
            document_responses=[DocumentResponseOut.from_domain(d) for d in result.document_responses],
        )
        status = 200
        if not result.succeeded:
            body.message = "Some documents failed to process"
            body.errors = [FileErrorOut.from_domain(e) for e in result.errors]
            status = 400
        return JSONResponse(
            status_code=status, content=body.model_dump(by_alias=True, exclude_none=True)
        )

    @app.get("/documents/{namespace_id}", response_model=list[FileDetailOut])
    async def list_files(
        namespace_id: str, svc: Services = Depends(get_services)
    ) -> list[FileDetailOut]:
        """List the files stored in a workspace."""
        files = await svc.orchestrator.list_files(namespace_id)
        return [FileDetailOut(**f.model_dump()) for f in files]

    @app.get("/documents/{namespace_id}/{document_id}", response_model=None)
    async def serve_document(
        namespace_id: str, document_id: str, svc: Services = Depends(get_services)
    ) -> FileResponse | JSONResponse:
        """Serve the original uploaded file."""
        try:
            path = svc.storage.get_file_path(namespace_id, document_id)
        except StorageError as exc:
            logger.warning("Cannot serve %s/%s: %s", namespace_id, document_id, exc)
            return JSONResponse(status_code=404, content={"message": "File not found"})
        return FileResponse(path, filename=path.name)

    @app.delete("/documents/{namespace_id}/{document_id}", response_model=MessageResponse)
    async def delete_document(
        namespace_id: str, document_id: str, svc: Services = Depends(get_services)
    ) -> MessageResponse:
        """Remove a document's chunks from the index."""
        removed = await svc.orchestrator.delete_document(document_id, namespace_id)
        return MessageResponse(message=f"Deleted {removed} chunks")

    @app.delete("/workspaces/{namespace_id}", response_model=None)
    async def delete_workspace(
        namespace_id: str, svc: Services = Depends(get_services)
    ) -> JSONResponse:
        """Delete a workspace's index namespace, then its stored files."""
        try:
            await svc.orchestrator.delete_workspace(namespace_id)
        except Exception:
            logger.exception("Error deleting workspace %s", namespace_id)
            return JSONResponse(status_code=500, content={"message": "Failed to delete workspace"})
        return JSONResponse(status_code=200, content={"message": "Workspace deleted successfully"})

    @app.post("/context", response_model=ContextResponse)
    async def fetch_context(
        body: ContextRequest, svc: Services = Depends(get_services)
    ) -> ContextResponse | JSONResponse:
        """Assemble grounding context for the latest chat message."""
        if not body.namespace_id or not body.messages:
            return JSONResponse(status_code=400, content={"message": "Missing required fields"})

        try:
            context = await svc.retrieval.assemble_context_text(
                latest_user_message(body.messages), body.namespace_id
            )
        except RetrievalError:
            logger.exception("Error fetching context")
            return JSONResponse(status_code=500, content={"message": "Failed to fetch context"})

        return ContextResponse(query=body.messages[-1], context=context)

    return app


app = create_app()
