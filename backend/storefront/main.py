import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.health import router as health_router
from storefront.api.routes_admin import router as admin_router
from storefront.api.routes_catalogue import router as catalogue_router
from storefront.api.routes_categories import router as categories_router
from storefront.config import settings
from storefront.db import init_db
from storefront.services.catalogue_query import CatalogueUnavailable
from storefront.utils.log import configure_logging

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("storefront.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    if settings.RESET_DB:
        log.warning("RESET_DB set: dropping and recreating catalogue tables")
    init_db(reset=settings.RESET_DB)
    yield


app = FastAPI(title="Storefront Catalogue - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogueUnavailable)
async def catalogue_unavailable_handler(request: Request, exc: CatalogueUnavailable):
    return JSONResponse(status_code=503, content={"detail": "Catalogue unavailable"})


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(categories_router, prefix="/api/categories", tags=["categories"])

app.include_router(admin_router, tags=["admin"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
