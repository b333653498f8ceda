from __future__ import annotations
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./edugame.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Columns added after the first deployment; create_all() does not alter existing tables
_LATE_COLUMNS = {
	"user_profiles": {
		"badge_id": "INTEGER",
	},
	"user_materials_quiz_progress": {
		"completed_attempts": "INTEGER DEFAULT 0 NOT NULL",
		"version_id": "INTEGER DEFAULT 1 NOT NULL",
	},
	"user_material_quiz_scores": {
		"version_id": "INTEGER DEFAULT 1 NOT NULL",
	},
}


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema(bind=None) -> None:
	bind = bind or engine
	try:
		inspector = inspect(bind)
		tables = set(inspector.get_table_names())
	except Exception:
		return
	for table, columns in _LATE_COLUMNS.items():
		if table not in tables:
			continue
		existing = {c["name"] for c in inspector.get_columns(table)}
		with bind.begin() as conn:
			for name, ddl in columns.items():
				if name not in existing:
					conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
