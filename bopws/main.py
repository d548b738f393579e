"""
BOP Web Service
Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import sys

from bopws import __version__
from bopws.config import settings
from bopws.errors import BackendQueryError, GatewayError
from bopws.router.search import router as search_router
from bopws.utils.solr_client import get_solr_client

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="BOP Web Service",
    description="Search and analytics over geo-tagged tweets",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware; dashboards call this from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(search_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "BOP Web Service",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "bopws",
        "version": __version__
    }


@app.on_event("startup")
async def startup_event():
    """Startup event handler"""
    logger.info("BOP Web Service starting up...")
    logger.info(f"Environment: {'DEBUG' if settings.debug else 'PRODUCTION'}")
    logger.info(f"Solr URL: {settings.solr_url}")
    logger.info("Startup complete!")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown event handler"""
    logger.info("BOP Web Service shutting down...")
    await get_solr_client().aclose()


@app.exception_handler(GatewayError)
async def gateway_exception_handler(request: Request, exc: GatewayError):
    """Named gateway errors carry their own status"""
    if isinstance(exc, BackendQueryError):
        logger.error(f"Search backend failed ({exc.status_code}): {exc.detail}")
        content = {"detail": exc.detail, "code": exc.code or exc.status_code}
    else:
        logger.info(f"Rejected {request.url.path}: {exc.detail}")
        content = {"detail": exc.detail, "code": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Param validation failures are client errors; report them as 400"""
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_errors(exc)}
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.debug else "An error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bopws.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level
    )
