import logfire

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contextlib import asynccontextmanager

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from middleware.error_handler import register_exception_handlers
from models.users import User
from routers import auth, health
from utils.config import get_settings
from utils.logger import configure_logging, instrument_libraries


settings = get_settings()

# Configure logfire BEFORE creating FastAPI app
configure_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logfire.info("Starting backend template API...")

    client = AsyncIOMotorClient(settings.database_connection_string)  # * Connect to MongoDB

    await init_beanie(
        database=client[settings.database_name],
        document_models=[User],
    )
    logfire.info("Database initialized successfully")

    yield

    logfire.info("Shutting down backend template API...")
    client.close()
    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Backend Template API",
    description="User registration and JWT access/refresh token authentication.",
    lifespan=lifespan,
)

instrument_libraries(app, settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port)
