import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.server.routes import router as api_router, get_registry

logger = logging.getLogger(__name__)
logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# Set httpx logger level to WARNING to reduce verbosity
logging.getLogger("httpx").setLevel(logging.WARNING)

app = FastAPI(
    title="Agent Tool Adapters API",
    description="Invoke LLM gateway, evaluation and vector search tools through one adapter contract.",
    version="0.1.0",
)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup: registering tools...")
    registry = get_registry()
    logger.info(f"Application startup: tools available: {registry.list_tools()}")


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# All routes defined in api_router are prefixed with /api
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Application Health"])
async def app_health_check():
    return {"status": "Application is healthy"}


def main():
    logger.info("Starting Uvicorn server for Agent Tool Adapters API...")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
