from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from peoplehub.api import analytics_routes, employee_routes, upload_routes
from peoplehub.config import get_settings
from peoplehub.database import init_db
from peoplehub.logging_config import setup_logging

settings = get_settings()
setup_logging(settings.log_level, settings.log_json)

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield

app = FastAPI(title="PeopleHub API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics_routes.router)
app.include_router(employee_routes.router)
app.include_router(upload_routes.router)

@app.get("/")
def health_check():
    return {"status": "online", "message": "PeopleHub Analytics is Running"}
