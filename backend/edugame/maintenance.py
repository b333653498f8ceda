from __future__ import annotations
import logging

from sqlalchemy.orm import Session

from .badges import IMAGE_SUFFIX, LEGACY_IMAGE_SUFFIX, normalize_image
from .models import Badge


logger = logging.getLogger(__name__)

# Five tiers covering levels 1..8, one per level name
DEFAULT_BADGES = [
	{"badge_id": 1, "nama": "Pemula", "gambar": "/badges/pemula.png", "level_min": 1, "level_max": 2},
	{"badge_id": 2, "nama": "Amatir", "gambar": "/badges/amatir.png", "level_min": 3, "level_max": 4},
	{"badge_id": 3, "nama": "Basic", "gambar": "/badges/basic.png", "level_min": 5, "level_max": 6},
	{"badge_id": 4, "nama": "Pro", "gambar": "/badges/pro.png", "level_min": 7, "level_max": 7},
	{"badge_id": 5, "nama": "Ace", "gambar": "/badges/ace.png", "level_min": 8, "level_max": 8},
]


def seed_badge_catalog(db: Session) -> int:
	if db.query(Badge).first() is not None:
		return 0
	for row in DEFAULT_BADGES:
		db.add(Badge(**row))
	db.commit()
	logger.info("Seeded badge catalog with %d badges", len(DEFAULT_BADGES))
	return len(DEFAULT_BADGES)


def migrate_badge_images(db: Session) -> int:
	"""Rewrite stored .jpg badge references to .png once, in the catalog itself."""
	migrated = 0
	rows = db.query(Badge).filter(Badge.gambar.like(f"%{LEGACY_IMAGE_SUFFIX}")).all()
	for row in rows:
		fixed = normalize_image(row.gambar)
		if fixed != row.gambar:
			row.gambar = fixed
			migrated += 1
	db.commit()
	if migrated:
		logger.info("Rewrote %d badge images from %s to %s", migrated, LEGACY_IMAGE_SUFFIX, IMAGE_SUFFIX)
	return migrated
