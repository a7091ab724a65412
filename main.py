# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotation_backend.core.config import LOG_LEVEL
from quotation_backend.core.db import init_models
from quotation_backend.middleware.activity_logger import ActivityLoggerMiddleware
from quotation_backend.routers import auth_router, quotations_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="Quotation Back-Office API",
    description="FastAPI backend for quotation pricing and lifecycle management",
    version="0.1.0"
)
# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ActivityLoggerMiddleware)


# Health check endpoint
@app.get("/", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Backend is running"}

# Register routers
app.include_router(auth_router)
app.include_router(quotations_router)


@app.on_event("startup")
async def on_startup():
    await init_models()
