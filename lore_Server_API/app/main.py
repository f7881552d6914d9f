# main.py
# Description: This file contains the main FastAPI application, which serves the lore wiki API and the uploaded media.
#
# Imports
import logging
import sys
#
# 3rd-party Libraries
from loguru import logger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles
#
# Local Imports
from lore_Server_API.app.core.config import ALLOWED_ORIGINS, settings
#
# Lore Endpoint
from lore_Server_API.app.api.v1.endpoints.lore import router as lore_router
#
# Media Endpoint
from lore_Server_API.app.api.v1.endpoints.media import router as media_router
#
########################################################################################################################
#
# Functions:


# --- Loguru Configuration with Intercept Handler ---

# Define a handler class to intercept standard logging messages
class InterceptHandler(logging.Handler):
    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


# Remove default handler
logger.remove()

logger.add(
    sys.stderr,
    level=settings["LOG_LEVEL"],
    format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    colorize=True,
)

# Configure standard logging to use the InterceptHandler
loggers_to_intercept = ["uvicorn", "uvicorn.error", "uvicorn.access"]
for logger_name in loggers_to_intercept:
    mod_logger = logging.getLogger(logger_name)
    mod_logger.handlers = [InterceptHandler()]
    mod_logger.propagate = False  # Prevent messages from reaching the root logger


app = FastAPI(
    title="Lore API",
    version="0.1.0",
    description="FastAPI backend for the personal lore wiki: entries, uploads and media attachments"
)

origins = ALLOWED_ORIGINS if ALLOWED_ORIGINS else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded blobs, fetched by the URL stored in each media reference
app.mount(settings["UPLOADS_URL_PREFIX"], StaticFiles(directory=settings["UPLOADS_DIR"]), name="uploads")


@app.get("/")
async def root():
    return {"message": "Welcome to the Lore API; If you're seeing this, the server is running!"}


# Router for lore entry CRUD
app.include_router(lore_router, prefix="/api/lore", tags=["lore"])

# Router for uploads and media attachments
app.include_router(media_router, prefix="/api", tags=["media"])


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def run():
    """Console entry point: serve the API on the configured host and port."""
    import uvicorn

    logger.info(f"Lore server running on http://{settings['HOST']}:{settings['PORT']}")
    uvicorn.run(app, host=settings["HOST"], port=settings["PORT"], log_config=None)


if __name__ == "__main__":
    run()

#
## End of main.py
########################################################################################################################
