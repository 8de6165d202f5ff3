"""FastAPI application entry point"""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lp_variants.api import variants
from lp_variants.core.config import get_settings

settings = get_settings()

# Configure logging early with force=True to override any existing config
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "healthy", "version": settings.api_version}


@app.get("/health")
async def health():
    """Health check for monitoring"""
    return {"status": "healthy"}


# Register API routes
app.include_router(variants.router, prefix="/api", tags=["variants"])


def run():
    """Console entry point: serve the API with uvicorn"""
    import uvicorn

    logger.info(f"Starting {settings.api_title} on {settings.host}:{settings.port}")
    uvicorn.run("lp_variants.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
