import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.database import AsyncSessionLocal, engine
from core.errors import LoveConnectError
from models.base import Base, import_all_models
from services.gifts import ensure_catalog

from routers.user import router as user_router
from routers.interactions import router as interactions_router
from routers.messages import router as messages_router
from routers.gifts import router as gifts_router
from routers.notifications import router as notifications_router
from routers.health import router as health_router

app = FastAPI(
    title="LoveConnect Backend",
    version="0.1.0",
    description="Backend для демо-приложения знакомств LoveConnect"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response


@app.exception_handler(LoveConnectError)
async def handle_domain_error(request: Request, exc: LoveConnectError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(user_router)
app.include_router(interactions_router)
app.include_router(messages_router)
app.include_router(gifts_router)
app.include_router(notifications_router)
app.include_router(health_router)


@app.on_event("startup")
async def on_startup():

    # Сначала создаём все таблицы
    import_all_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        added = await ensure_catalog(session)
        if added:
            logger.info(f"Gift catalog initialised with {added} gifts")


@app.get("/")
async def root():
    return {"message": "LoveConnect Backend"}


@app.on_event("shutdown")
async def shutdown():
    # Закрываем все соединения пула
    await engine.dispose()
