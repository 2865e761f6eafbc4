import logging
from fastapi import FastAPI
from daily_tasks.core.config import settings
from daily_tasks.core.database import engine, Base
from daily_tasks.models import task, performance_entry  # noqa: F401  (enregistre les tables)
from daily_tasks.routers import health, auth, tasks, performance

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if settings.cloud_ready:
    # Init DB
    Base.metadata.create_all(bind=engine)
else:
    logger.warning("BACKEND_URL / BACKEND_PUBLIC_KEY not set: cloud features disabled")

app = FastAPI(
    title="Daily Task Tracker API",
    version="3.1.0"
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(performance.router)
