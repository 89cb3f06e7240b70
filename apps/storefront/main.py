import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .core.catalog_client import CatalogFetchError
from .routers import admin, catalog

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Storefront Catalog API", version="1.0.0")

# The storefront frontend runs on its own origin in development.
_cors_origins = os.environ.get(
    "CORS_ALLOW_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])


@app.exception_handler(CatalogFetchError)
async def catalog_unavailable(request: Request, exc: CatalogFetchError) -> JSONResponse:
    """The snapshot backend failed; report it as an upstream error."""
    logging.warning("catalog snapshot unavailable for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/")
def root() -> dict[str, str]:
    return {
        "message": "Storefront Catalog API. Browse /catalog/products or the OpenAPI UI at /docs.",
        "health": "/healthz",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)


@app.get("/healthz")
def healthcheck() -> dict[str, str]:
    """Liveness check; does not touch the catalog snapshot."""
    return {"status": "ok"}
