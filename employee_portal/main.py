import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from employee_portal.core.config import settings
from employee_portal.core.errors import register_exception_handlers
from employee_portal.core.log_config import setup_logging
from employee_portal.api.router import api
from employee_portal.db.session import engine
from employee_portal.db.base import Base

# Import models so Base knows them
from employee_portal.db import models  # noqa: F401

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables automatically (simple start). For production, replace with migrations.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    yield
    await engine.dispose()

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
register_exception_handlers(app)

app.include_router(api)

@app.get("/health")
def health():
    return {"ok": True}

def run():
    import uvicorn
    uvicorn.run("employee_portal.main:app", host="0.0.0.0", port=settings.PORT)

if __name__ == "__main__":
    run()
