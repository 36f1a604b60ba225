import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from routers import availability, courses, reservations, sites, users
from sitebook.config import settings
from sitebook.db import init_db, seed_db
from sitebook.errors import ReservationError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Site Reservation API", version="0.1.0")

app.include_router(sites.router, prefix="/sites", tags=["sites"])
app.include_router(availability.router, prefix="/availability", tags=["availability"])
app.include_router(reservations.router, tags=["reservations"])
app.include_router(courses.router, prefix="/courses", tags=["courses"])
app.include_router(users.router, prefix="/users", tags=["users"])


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.msg, "code": exc.code},
    )


@app.on_event("startup")
def on_startup():
    if settings.skip_db_init:
        return
    init_db()
    seed_db()
    logger.info("database ready at %s", settings.database_url)


@app.get("/")
def root():
    return {"ok": True, "service": "sitebook"}
