# main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorDatabase

from krixflow.core.config import settings
from krixflow.core.errors import register_exception_handlers
from krixflow.core.logging_setup import setup_logging
from krixflow.db import get_db, init_indexes
from krixflow.routers import auth, inventory, profiles, reports, users

logger = logging.getLogger("krixflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_indexes(get_db())
    logger.info("KrixFlow API started against database %s", settings.db_name)
    yield


app = FastAPI(title="KrixFlow Inventory API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(inventory.router)
app.include_router(reports.router)
app.include_router(profiles.candidates)
app.include_router(profiles.recruiters)


@app.get("/ping")
async def ping_db(db: AsyncIOMotorDatabase = Depends(get_db)):
    res = await db.command("ping")
    return {"mongo_ok": res.get("ok")}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
