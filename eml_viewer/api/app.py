"""
eml_viewer/api/app.py
---------------------
FastAPI service for the email viewer.
Accepts an uploaded .eml file, parses it, keeps the result in memory and
serves a viewer page plus attachment downloads.
"""

import time
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response

# Logging
from eml_viewer.utils.logging_utils import configure_logging, get_logger
from eml_viewer.utils.config import CONFIG, Settings

# Parser + storage
from eml_viewer.email_parser.errors import NestingTooDeep
from eml_viewer.email_parser.parser import parse_message
from eml_viewer.store.memory_store import MessageStore

from eml_viewer.api.auth import AuthError, auth_error_handler, require_token
from eml_viewer.api.rendering import render_email_page, render_not_found


# -------------------------------------------------------------------
# Initialize logging BEFORE creating the FastAPI app
# -------------------------------------------------------------------
configure_logging(CONFIG.LOG_DIR, CONFIG.LOG_LEVEL)
logger = get_logger()


def content_disposition(filename: str) -> str:
    """
    attachment; filename="..." with an ASCII-only fallback name, plus an
    RFC 5987 filename* parameter when the real name is not ASCII.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    fallback = fallback.replace('"', "").replace("\\", "")
    value = f'attachment; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def create_app(settings: Settings = CONFIG, store: Optional[MessageStore] = None) -> FastAPI:
    """
    Build the FastAPI application. Tests pass their own settings/store.
    """
    app = FastAPI(
        title="Email Viewer API",
        description="Upload .eml files and view them with HTML rendering and attachment support.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.store = store if store is not None else MessageStore(settings.STORE_CAPACITY)
    app.state.started_at = time.monotonic()

    if not settings.API_TOKEN:
        logger.warning("API_TOKEN is not set; every authenticated request will be rejected")

    origins = settings.cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AuthError, auth_error_handler)

    # -------------------------------------------------------------------
    # ROUTES
    # -------------------------------------------------------------------

    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.ENVIRONMENT,
            "uptime": time.monotonic() - app.state.started_at,
        }

    @app.post("/upload", dependencies=[Depends(require_token)])
    async def upload(request: Request, file: Optional[UploadFile] = File(None)):
        """
        Upload a .eml file; returns the id and viewer URL of the parsed message.
        """
        if file is None or not file.filename:
            return JSONResponse(content={"error": "No file provided"}, status_code=400)

        if not file.filename.lower().endswith(".eml"):
            return JSONResponse(content={"error": "Only .eml files are allowed"}, status_code=400)

        try:
            raw_bytes = await file.read(settings.MAX_UPLOAD_BYTES + 1)
            logger.info(f"Received file: name={file.filename}, size={len(raw_bytes)} bytes")

            if not raw_bytes:
                return JSONResponse(content={"error": "No file provided"}, status_code=400)

            if len(raw_bytes) > settings.MAX_UPLOAD_BYTES:
                return JSONResponse(
                    content={
                        "error": "File too large",
                        "details": f"limit is {settings.MAX_UPLOAD_BYTES} bytes",
                    },
                    status_code=413,
                )

            message = parse_message(
                raw_bytes.decode("utf-8", errors="replace"),
                max_depth=settings.MAX_NESTING_DEPTH,
            )
            entry = app.state.store.add(message)

            logger.info(
                "Parsed email | id={id} from={from_} subject={subject!r} attachments={n}",
                id=entry.id,
                from_=message.from_,
                subject=message.subject,
                n=len(message.attachments),
            )

            return JSONResponse(
                content={
                    "success": True,
                    "emailId": entry.id,
                    "viewUrl": str(request.url_for("view_email", email_id=entry.id)),
                    "message": "Email processed successfully",
                },
                status_code=200,
            )

        except NestingTooDeep as e:
            logger.warning(f"Rejected {file.filename}: {e}")
            return JSONResponse(
                content={"error": "nesting_too_deep", "detail": str(e)},
                status_code=422,
            )

        except Exception as e:
            logger.error(f"Error while processing email: {type(e).__name__}: {e}")
            return JSONResponse(
                content={"error": "Failed to process email file", "details": str(e)},
                status_code=500,
            )

    @app.get("/view/{email_id}", response_class=HTMLResponse, name="view_email")
    def view_email(email_id: str):
        entry = app.state.store.get(email_id)
        if entry is None:
            return HTMLResponse(content=render_not_found(), status_code=404)
        return HTMLResponse(content=render_email_page(entry))

    @app.get("/download/{email_id}/{index}", dependencies=[Depends(require_token)])
    def download_attachment(email_id: str, index: int):
        entry = app.state.store.get(email_id)
        if entry is None:
            return Response(content="Email not found", status_code=404, media_type="text/plain")

        attachments = entry.message.attachments
        if index < 0 or index >= len(attachments):
            return Response(content="Attachment not found", status_code=404, media_type="text/plain")

        attachment = attachments[index]
        return Response(
            content=attachment.to_bytes(),
            media_type=attachment.content_type,
            headers={"Content-Disposition": content_disposition(attachment.filename)},
        )

    @app.get("/")
    def home():
        logger.info("API description requested on /")
        return {
            "name": "Email Viewer API",
            "version": "1.0.0",
            "description": "Email .eml file viewer with HTML rendering and attachment support",
            "authentication": {
                "type": "Bearer Token",
                "header": "Authorization: Bearer YOUR_API_TOKEN",
                "note": "Required for all endpoints except /, /health and /view/{id}",
            },
            "endpoints": {
                "POST /upload": "Upload a .eml file (multipart/form-data, field 'file')",
                "GET /view/{id}": "View a processed email",
                "GET /download/{id}/{index}": "Download an attachment",
                "GET /health": "Health probe",
            },
        }

    return app


# -------------------------------------------------------------------
# Create FastAPI Application
# -------------------------------------------------------------------
app = create_app()
