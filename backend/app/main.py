import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import LOG_LEVEL, cors_origins
from app.routes import schedule

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Court Rotation Scheduler API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Stateless scheduling endpoints (nothing is stored between requests)
app.include_router(schedule.router, prefix="/api", tags=["schedule"])


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint"""
    return {"app_name": "Court Rotation Scheduler API", "status": "healthy"}
