from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreError
from .levels import calculate_level, level_name
from .models import UserMaterialQuizProgress, UserProfile


logger = logging.getLogger(__name__)


def sum_xp(values: Iterable[Optional[int]]) -> int:
	return sum(v or 0 for v in values)


def total_xp(db: Session, user_id: str) -> int:
	try:
		rows = (
			db.query(UserMaterialQuizProgress.xp_earned)
			.filter(UserMaterialQuizProgress.user_id == user_id)
			.all()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to load XP records for user %s", user_id)
		raise StoreError("could not load XP records") from e
	return sum_xp(xp for (xp,) in rows)


def leaderboard(db: Session, limit: int = 10) -> List[Dict[str, Any]]:
	xp_sum = func.sum(func.coalesce(UserMaterialQuizProgress.xp_earned, 0))
	try:
		rows = (
			db.query(UserMaterialQuizProgress.user_id, xp_sum.label("total_xp"), UserProfile.full_name)
			.outerjoin(UserProfile, UserProfile.user_id == UserMaterialQuizProgress.user_id)
			.group_by(UserMaterialQuizProgress.user_id, UserProfile.full_name)
			.order_by(xp_sum.desc(), UserMaterialQuizProgress.user_id)
			.limit(limit)
			.all()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to build leaderboard")
		raise StoreError("could not build leaderboard") from e
	board = []
	for rank, (user_id, xp, full_name) in enumerate(rows, start=1):
		level = calculate_level(xp)
		board.append({
			"rank": rank,
			"user_id": user_id,
			"full_name": full_name,
			"total_xp": int(xp or 0),
			"level": level,
			"level_name": level_name(level),
		})
	return board
