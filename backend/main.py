# backend/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db

# Root logger: one console handler, level from the environment
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Router imports
from routes.parameters import router as parameters_router
from routes.categories import router as categories_router
from routes.suppliers import router as suppliers_router
from routes.configurator import router as configurator_router
from routes.proposals import router as proposals_router
from routes.logs import router as logs_router

# Initialization
init_db()

app = FastAPI(title="Proposal Configurator API", version="1.0.0")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(parameters_router)
app.include_router(categories_router)
app.include_router(suppliers_router)
app.include_router(configurator_router)
app.include_router(proposals_router)
app.include_router(logs_router)

@app.get("/")
def read_root():
    return {"message": "Proposal Configurator API is running"}
