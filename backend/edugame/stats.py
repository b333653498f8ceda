from __future__ import annotations
import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .badges import assign_badge, badge_for_level
from .errors import BadgeNotFound, StoreError
from .levels import level_info
from .models import UserMaterialQuizProgress
from .xp import sum_xp


logger = logging.getLogger(__name__)


def user_stats(db: Session, user_id: str) -> Dict[str, Any]:
	try:
		progress = db.query(UserMaterialQuizProgress).filter(UserMaterialQuizProgress.user_id == user_id).all()
	except SQLAlchemyError as e:
		logger.exception("Failed to load quiz progress for user %s", user_id)
		raise StoreError("could not load quiz progress") from e

	info = level_info(sum_xp(p.xp_earned for p in progress))

	# Keep the profile badge in step with the level; a catalog gap only means "no badge"
	badge = None
	try:
		badge = badge_for_level(db, info.level)
	except BadgeNotFound:
		logger.warning("No badge covers level %s (user %s)", info.level, user_id)
	if badge is not None:
		assign_badge(db, user_id, badge.id)

	total_questions = sum(p.total_questions or 0 for p in progress)
	total_correct = sum(p.correct_answers or 0 for p in progress)
	completed = sum(1 for p in progress if p.is_completed or (p.completed_attempts or 0) > 0)
	return {
		**info.model_dump(),
		"badge": badge.model_dump() if badge is not None else None,
		"total_quizzes": len(progress),
		"completed_quizzes": completed,
		"total_questions_answered": total_questions,
		"total_correct_answers": total_correct,
		"accuracy": (total_correct * 200 + total_questions) // (2 * total_questions) if total_questions > 0 else 0,
	}
