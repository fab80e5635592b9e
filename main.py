import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from coursedesk.core.config import settings
from coursedesk.core.database import engine
from coursedesk.core.exceptions import register_exception_handlers
from coursedesk.core.logging_config import setup_logging
from coursedesk.models.postgresql import Base
from coursedesk.core import cassandra_db
from coursedesk.core.minio_client import init_minio
from coursedesk.services.connection_registry import ConnectionRegistry
from coursedesk.api.v1.endpoints import (
    auth, courses, enrollments, assignments, submissions, grades,
    discussions, materials, notifications, teacher, student, ws,
)
import uvicorn

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    app.state.connections = ConnectionRegistry()

    if settings.CASSANDRA_ENABLED:
        try:
            cassandra_db.cassandra_client.connect()
        except Exception as e:
            logger.error("Error connecting to Cassandra: %s", e)

    if settings.MINIO_ENABLED:
        try:
            init_minio()
        except Exception as e:
            logger.error("Error initializing MinIO: %s", e)

    yield

    # Shutdown logic
    await app.state.connections.close_all()
    cassandra_db.cassandra_client.close()

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
register_exception_handlers(app)

# Include Routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(courses.router, prefix="/api/v1/courses", tags=["courses"])
app.include_router(enrollments.router, prefix="/api/v1/enrollments", tags=["enrollments"])
app.include_router(assignments.router, prefix="/api/v1/assignments", tags=["assignments"])
app.include_router(submissions.router, prefix="/api/v1/submissions", tags=["submissions"])
app.include_router(grades.router, prefix="/api/v1/grades", tags=["grades"])
app.include_router(discussions.router, prefix="/api/v1/discussions", tags=["discussions"])
app.include_router(materials.router, prefix="/api/v1/materials", tags=["materials"])
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["notifications"])
app.include_router(teacher.router, prefix="/api/v1/teacher", tags=["teacher"])
app.include_router(student.router, prefix="/api/v1/student", tags=["student"])
app.include_router(ws.router, tags=["live"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
