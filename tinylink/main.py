import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from . import crud, database, models, qr_utils, schemas

load_dotenv(Path(__file__).parent.parent / ".env")

ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
STARTED_AT = time.monotonic()

# --- Logging ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("tinylink")

# --- DB tables ---
models.Base.metadata.create_all(bind=database.engine)

app = FastAPI(
    title="TinyLink",
    description="Short links with click tracking.",
    version=APP_VERSION,
)

# --- CORS (allow frontend dev servers, etc.) ---
origins = ["*"] if ENVIRONMENT == "dev" else [
    os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error mapping ---
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # report only the first problem, one message per reply
    error = exc.errors()[0]
    loc = error.get("loc", ())
    field = ".".join(str(part) for part in loc[1:]) or ".".join(str(part) for part in loc)
    detail = f"{field}: {error['msg']}" if field else error["msg"]
    return JSONResponse(status_code=400, content={"detail": detail})

@app.exception_handler(crud.CodeConflictError)
async def code_conflict_handler(request: Request, exc: crud.CodeConflictError):
    return JSONResponse(status_code=409, content={"detail": "Code already exists"})

@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# ---- Serve frontend (same origin) ----
FRONTEND_DIR = Path(__file__).parent / "frontend"
app.mount("/static", StaticFiles(directory=FRONTEND_DIR), name="static")

@app.get("/", include_in_schema=False)
def serve_dashboard():
    return FileResponse(FRONTEND_DIR / "index.html")

def public_base_url(request: Request) -> str:
    return os.getenv("PUBLIC_BASE_URL") or str(request.base_url).rstrip("/")

# Small config for frontend to know public base URL
@app.get("/config", include_in_schema=False)
def get_config(request: Request):
    return {"public_base_url": public_base_url(request)}

# Liveness only; "database" is not probed
@app.get("/healthz", response_model=schemas.Health)
def health():
    return schemas.Health(
        status="ok",
        version=APP_VERSION,
        timestamp=datetime.now(timezone.utc),
        environment=ENVIRONMENT,
        database="connected",
        uptime=round(time.monotonic() - STARTED_AT, 3),
    )

# ---------- API ----------
@app.get("/api/links", response_model=list[schemas.LinkOut])
def list_links(db=Depends(database.get_db)):
    return crud.list_links(db)

@app.post("/api/links", response_model=schemas.LinkOut, status_code=201)
def create_link(link_in: schemas.LinkCreate, db=Depends(database.get_db)):
    link = crud.create_link(db, link_in)
    logger.info("Created link: code=%s target=%s", link.code, link.original_url)
    return link

# Must stay above /api/links/{code}
@app.get("/api/links/check", response_model=schemas.Availability)
def check_code(code: str | None = Query(None), db=Depends(database.get_db)):
    code = (code or "").strip()
    if not code:
        raise HTTPException(status_code=400, detail="'code' query parameter is required")
    return {"available": not crud.code_exists(db, code)}

@app.get("/api/links/{code}", response_model=schemas.LinkStats | schemas.CodeAvailable)
def link_stats(code: str, db=Depends(database.get_db)):
    link = crud.get_link(db, code)
    if not link:
        return schemas.CodeAvailable()
    return schemas.LinkStats.model_validate(link)

# Older path for the same stats lookup
@app.get("/code/{code}", response_model=schemas.LinkStats | schemas.CodeAvailable, include_in_schema=False)
def link_stats_legacy(code: str, db=Depends(database.get_db)):
    return link_stats(code, db)

@app.delete("/api/links/{code}", status_code=204)
def delete_link(code: str, db=Depends(database.get_db)):
    if not crud.delete_link(db, code):
        raise HTTPException(status_code=404, detail="Link not found")
    logger.info("Deleted link %s", code)
    return Response(status_code=204)

@app.get("/api/links/{code}/qr", response_model=schemas.QRCodeOut)
def qr_code(code: str, request: Request, db=Depends(database.get_db)):
    link = crud.get_link(db, code)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    target = qr_utils.short_url(public_base_url(request), link.code)
    return {"qr_base64": qr_utils.generate_qr_base64(target)}

# Redirect /{code}; registered last so it never shadows the routes above
@app.get("/{code}", include_in_schema=False)
def redirect(code: str, db=Depends(database.get_db)):
    if not schemas.is_valid_code(code):
        raise HTTPException(status_code=404, detail="Link not found")
    link = crud.record_click(db, code)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    logger.debug("Redirect %s -> %s (clicks=%d)", code, link.original_url, link.clicks)
    return RedirectResponse(url=link.original_url, status_code=307)


if __name__ == "__main__":
    uvicorn.run(
        "tinylink.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=ENVIRONMENT == "dev",
    )
