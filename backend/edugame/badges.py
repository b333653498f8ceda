"""Badge catalog lookups.

Some catalog rows were ingested with a ``.jpg`` image reference although the
asset on disk is a ``.png``. Every read path below goes through
``normalize_image`` so callers never see the stale extension.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import BadgeNotFound, StoreError
from .levels import LevelInfo, level_info
from .models import Badge, UserProfile
from .xp import total_xp


logger = logging.getLogger(__name__)

LEGACY_IMAGE_SUFFIX = ".jpg"
IMAGE_SUFFIX = ".png"


class BadgeRecord(BaseModel):
	id: int
	name: str
	image_url: str
	level_min: int
	level_max: int
	description: Optional[str] = None


class BadgeUpdate(BaseModel):
	badge: BadgeRecord
	level: LevelInfo


def normalize_image(ref: str) -> str:
	if ref and ref.endswith(LEGACY_IMAGE_SUFFIX):
		return ref[: -len(LEGACY_IMAGE_SUFFIX)] + IMAGE_SUFFIX
	return ref


def to_record(row: Badge) -> BadgeRecord:
	# Build a detached copy; touching row.gambar would be flushed back to the catalog
	return BadgeRecord(
		id=row.badge_id,
		name=row.nama,
		image_url=normalize_image(row.gambar),
		level_min=row.level_min,
		level_max=row.level_max,
		description=row.description,
	)


def badge_by_id(db: Session, badge_id: int) -> BadgeRecord:
	try:
		row = db.get(Badge, badge_id)
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch badge %s", badge_id)
		raise StoreError("could not fetch badge") from e
	if row is None:
		raise BadgeNotFound(f"badge {badge_id} not found")
	return to_record(row)


def all_badges(db: Session) -> List[BadgeRecord]:
	try:
		rows = db.query(Badge).order_by(Badge.badge_id.asc()).all()
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch badge catalog")
		raise StoreError("could not fetch badges") from e
	return [to_record(r) for r in rows]


def badge_for_level(db: Session, level: int) -> BadgeRecord:
	try:
		rows = (
			db.query(Badge)
			.filter(Badge.level_min <= level, Badge.level_max >= level)
			.order_by(Badge.level_min.asc(), Badge.badge_id.asc())
			.all()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch badge for level %s", level)
		raise StoreError("could not fetch badge") from e
	if not rows:
		raise BadgeNotFound(f"no badge covers level {level}")
	if len(rows) > 1:
		logger.warning("Badge ranges overlap at level %s: %s", level, [r.badge_id for r in rows])
	return to_record(rows[0])


def unlocked_badges_for_level(db: Session, level: int) -> List[BadgeRecord]:
	try:
		rows = (
			db.query(Badge)
			.filter(Badge.level_min <= level)
			.order_by(Badge.level_min.asc(), Badge.badge_id.asc())
			.all()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch unlocked badges for level %s", level)
		raise StoreError("could not fetch badges") from e
	return [to_record(r) for r in rows]


def assign_badge(db: Session, user_id: str, badge_id: int) -> None:
	try:
		profile = db.get(UserProfile, user_id)
		if profile is None:
			profile = UserProfile(user_id=user_id)
			db.add(profile)
		if profile.badge_id != badge_id:
			profile.badge_id = badge_id
		db.commit()
	except SQLAlchemyError as e:
		db.rollback()
		logger.exception("Failed to store badge %s for user %s", badge_id, user_id)
		raise StoreError("could not update badge") from e


def update_user_badge(db: Session, user_id: str) -> BadgeUpdate:
	info = level_info(total_xp(db, user_id))
	badge = badge_for_level(db, info.level)
	assign_badge(db, user_id, badge.id)
	logger.info("User %s is level %s with badge %s", user_id, info.level, badge.id)
	return BadgeUpdate(badge=badge, level=info)
