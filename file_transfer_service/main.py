from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from database import engine, init_db
from dependencies import file_storage
from routers import files as files_router
from routers import directories as directories_router
from logging_config import get_logger
from config import settings

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing file transfer service...")
    logger.info(f"Database: {settings.DATABASE_URL}")
    logger.info(f"Upload directory: {settings.UPLOAD_DIR}")
    await init_db(engine)
    await file_storage.init()
    logger.info("File transfer service is ready!")
    yield
    logger.info("File transfer service shutting down...")
    await engine.dispose()

app = FastAPI(
    title="File Transfer Service",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(files_router.router)
app.include_router(directories_router.router)

@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "service": "file-transfer-api"}

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting file transfer service on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
