# gaadiyaan/main.py
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import router as api_router
from .config import settings
from .db import init_db
from .exceptions import GaadiyaanError, ValidationError
from .utils import logger

# create FastAPI instance
app = FastAPI(title=settings.api_title, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)


def error_body(exc: GaadiyaanError) -> dict:
    body = {"success": False, "message": exc.message, "error": exc.kind}
    if isinstance(exc, ValidationError) and exc.fields:
        body["fields"] = exc.fields
    return body


@app.exception_handler(GaadiyaanError)
async def gaadiyaan_error_handler(request: Request, exc: GaadiyaanError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return JSONResponse(
        status_code=400,
        content=error_body(ValidationError(f"Invalid request fields: {', '.join(fields)}", fields)),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "error": "http_error"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = {"success": False, "message": "Internal server error", "error": "internal_error"}
    if settings.expose_errors:
        body["detail"] = str(exc)
    return JSONResponse(status_code=500, content=body)


@app.get("/")
def root():
    return {"message": f"Welcome to {settings.api_title}", "version": settings.api_version}


app.include_router(api_router)

app.mount(
    settings.upload_url_path,
    StaticFiles(directory=settings.upload_root, check_dir=False),
    name="uploads",
)
for prefix, directory in settings.static_roots.items():
    app.mount(prefix, StaticFiles(directory=directory, check_dir=False), name=f"static:{prefix}")


@app.on_event("startup")
def on_startup():
    # Ensure database tables and the upload directory exist on startup
    Path(settings.upload_root).mkdir(parents=True, exist_ok=True)
    init_db()
    if settings.uses_default_secret:
        logger.warning("SECRET_KEY is not set; using the development key")
    logger.info("Gaadiyaan API started (uploads in %s)", settings.upload_root)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gaadiyaan.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
