import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Base, SessionLocal, engine, ensure_schema
from .maintenance import migrate_badge_images, seed_badge_catalog
from .settings import settings
from .routers import badges, health, quiz, user

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("edugame")

app = FastAPI(title="Edugame Gamification API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(health.router)
app.include_router(badges.router)
app.include_router(quiz.router)
app.include_router(user.router)


def prepare_database(bind=None) -> None:
	bind = bind or engine
	Base.metadata.create_all(bind=bind)
	# Apply lightweight dev migrations
	ensure_schema(bind)
	db = SessionLocal(bind=bind)
	try:
		if settings.seed_badges:
			seed_badge_catalog(db)
		if settings.fix_badge_images_on_startup:
			migrate_badge_images(db)
	finally:
		db.close()


@app.on_event("startup")
async def startup_event():
	try:
		prepare_database()
	except Exception:
		# Requests will surface store errors on their own
		logger.exception("Database preparation failed")
