"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bagconvert.api.routes import router
from bagconvert.config import CORS_ORIGINS, SCRATCH_DIR, logger as config_logger
from bagconvert.conversion.models import SupportedFormats

logging.getLogger("uvicorn").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config_logger.info(
        "Converter API started (image=%s, video=%s, scratch=%s)",
        ",".join(SupportedFormats.IMAGE), ",".join(SupportedFormats.VIDEO), SCRATCH_DIR,
    )
    yield
    config_logger.info("Converter API shutting down")


app = FastAPI(
    title="Put The Files In The Bag Converter API",
    description="Convert an image or video into several formats with embeddable snippets.",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    from bagconvert.config import HOST, PORT
    uvicorn.run("bagconvert.main:app", host=HOST, port=PORT, reload=True)
