from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .errors import QuizNotFound, StaleWriteError, StoreError, ValidationError
from .models import (
	Material,
	MaterialPageQuiz,
	QuizOption,
	QuizQuestion,
	UserMaterialQuizProgress,
	UserMaterialQuizScore,
	UserQuizAnswer,
)
from .settings import settings


logger = logging.getLogger(__name__)

RESULT_CORRECT = "correct"
RESULT_INCORRECT = "incorrect"
# Result words written by the first version of the page quiz
_LEGACY_CORRECT = "benar"


class PageAnswerResult(BaseModel):
	is_correct: bool
	correct_answer: int
	selected_answer: int
	total_correct: int
	total_answered: int


class AttemptProgress(BaseModel):
	questions_answered: int
	correct_answers: int
	total_questions: int
	xp_earned: int
	is_completed: bool
	completed_attempts: int


class AttemptAnswerResult(BaseModel):
	is_correct: bool
	xp_earned: int
	correct_option_id: int
	progress: AttemptProgress


def _now_iso() -> str:
	return datetime.now(timezone.utc).isoformat()


def _commit(db: Session, what: str) -> None:
	try:
		db.commit()
	except (StaleDataError, IntegrityError) as e:
		db.rollback()
		logger.warning("Concurrent update rejected while saving %s: %s", what, e)
		raise StaleWriteError(f"{what} was changed by another request, retry") from e
	except SQLAlchemyError as e:
		db.rollback()
		logger.exception("Failed to save %s", what)
		raise StoreError(f"could not save {what}") from e


# ---- Page quizzes -----------------------------------------------------------

def entry_is_correct(entry: Any) -> bool:
	if isinstance(entry, Mapping):
		entry = entry.get("result")
	return entry in (RESULT_CORRECT, _LEGACY_CORRECT)


def tally_page_scores(page_scores: Mapping[str, Any]) -> Tuple[int, int]:
	"""Return (total_correct, total_answered) by rescanning every page."""
	correct = sum(1 for entry in page_scores.values() if entry_is_correct(entry))
	return correct, len(page_scores)


def apply_page_answer(
	page_scores: Mapping[str, Any],
	total_correct: int,
	total_answered: int,
	page_key: str,
	entry: Dict[str, Any],
) -> Tuple[Dict[str, Any], int, int]:
	"""Overwrite one page entry and move the counters by the resulting delta."""
	previous = page_scores.get(page_key)
	was_answered = previous is not None
	was_correct = was_answered and entry_is_correct(previous)
	now_correct = entry_is_correct(entry)

	if not was_answered:
		total_answered += 1
		if now_correct:
			total_correct += 1
	elif was_correct and not now_correct:
		total_correct -= 1
	elif not was_correct and now_correct:
		total_correct += 1

	updated = dict(page_scores)
	updated[page_key] = entry
	return updated, total_correct, total_answered


def _find_page_quiz(db: Session, material_id: int, page_number: int) -> Optional[MaterialPageQuiz]:
	try:
		return (
			db.query(MaterialPageQuiz)
			.filter(MaterialPageQuiz.material_id == material_id, MaterialPageQuiz.page_number == page_number)
			.first()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch quiz for material %s page %s", material_id, page_number)
		raise StoreError("could not fetch quiz") from e


def _find_ledger(db: Session, user_id: str, material_id: int) -> Optional[UserMaterialQuizScore]:
	try:
		return (
			db.query(UserMaterialQuizScore)
			.filter(UserMaterialQuizScore.user_id == user_id, UserMaterialQuizScore.material_id == material_id)
			.first()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch quiz scores for user %s material %s", user_id, material_id)
		raise StoreError("could not fetch quiz scores") from e


def get_page_quiz(db: Session, material_id: int, page_number: int) -> Dict[str, Any]:
	quiz = _find_page_quiz(db, material_id, page_number)
	if quiz is None:
		raise QuizNotFound(f"no quiz for material {material_id} page {page_number}")
	return {
		"material_id": quiz.material_id,
		"page_number": quiz.page_number,
		"question": quiz.question,
		"options": list(quiz.options or []),
	}


def save_page_quiz(
	db: Session,
	material_id: int,
	page_number: int,
	question: str,
	options: List[str],
	correct_answer: int,
) -> Dict[str, Any]:
	question = (question or "").strip()
	if not question or not options:
		raise ValidationError("question and options are required")
	if correct_answer < 0 or correct_answer >= len(options):
		raise ValidationError(f"correct_answer must be 0..{len(options) - 1}")
	quiz = _find_page_quiz(db, material_id, page_number)
	if quiz is None:
		quiz = MaterialPageQuiz(material_id=material_id, page_number=page_number)
		db.add(quiz)
	quiz.question = question
	quiz.options = list(options)
	quiz.correct_answer = correct_answer
	_commit(db, "page quiz")
	return get_page_quiz(db, material_id, page_number)


def submit_page_answer(
	db: Session,
	user_id: str,
	material_id: int,
	page_number: int,
	selected_answer: Optional[int],
) -> PageAnswerResult:
	if not user_id or not material_id or not page_number or selected_answer is None:
		raise ValidationError("Missing required fields")

	quiz = _find_page_quiz(db, material_id, page_number)
	if quiz is None:
		raise QuizNotFound(f"no quiz for material {material_id} page {page_number}")

	is_correct = quiz.correct_answer == selected_answer
	entry = {
		"result": RESULT_CORRECT if is_correct else RESULT_INCORRECT,
		"selected_answer": selected_answer,
		"answered_at": _now_iso(),
	}

	ledger = _find_ledger(db, user_id, material_id)
	if ledger is None:
		ledger = UserMaterialQuizScore(user_id=user_id, material_id=material_id, page_scores={}, total_correct=0, total_answered=0)
		db.add(ledger)

	# Assign a fresh dict so the JSON column is marked dirty
	ledger.page_scores, ledger.total_correct, ledger.total_answered = apply_page_answer(
		ledger.page_scores or {},
		ledger.total_correct or 0,
		ledger.total_answered or 0,
		str(page_number),
		entry,
	)
	_commit(db, "quiz score")
	logger.info(
		"User %s answered material %s page %s: %s (%s/%s)",
		user_id, material_id, page_number, entry["result"], ledger.total_correct, ledger.total_answered,
	)
	return PageAnswerResult(
		is_correct=is_correct,
		correct_answer=quiz.correct_answer,
		selected_answer=selected_answer,
		total_correct=ledger.total_correct,
		total_answered=ledger.total_answered,
	)


def page_answer(db: Session, user_id: str, material_id: int, page_number: int) -> Optional[Dict[str, Any]]:
	ledger = _find_ledger(db, user_id, material_id)
	if ledger is None:
		return None
	entry = (ledger.page_scores or {}).get(str(page_number))
	if entry is None:
		return None
	if isinstance(entry, Mapping):
		selected = entry.get("selected_answer")
		selected = -1 if selected is None else selected
	else:
		# Old rows stored only the result word
		selected = -1
	quiz = _find_page_quiz(db, material_id, page_number)
	return {
		"is_correct": entry_is_correct(entry),
		"selected_answer": selected,
		"correct_answer": quiz.correct_answer if quiz is not None else -1,
		"total_correct": ledger.total_correct,
		"total_answered": ledger.total_answered,
	}


def user_material_scores(db: Session, user_id: str) -> List[Dict[str, Any]]:
	try:
		ledgers = db.query(UserMaterialQuizScore).filter(UserMaterialQuizScore.user_id == user_id).all()
		material_ids = [row.material_id for row in ledgers]
		pages_by_material: Dict[int, int] = {}
		if material_ids:
			for m in db.query(Material).filter(Material.id.in_(material_ids)).all():
				pages_by_material[m.id] = len(m.pages or []) or 1
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch quiz scores for user %s", user_id)
		raise StoreError("could not fetch quiz scores") from e

	scores = []
	for ledger in ledgers:
		total_pages = pages_by_material.get(ledger.material_id, 1)
		answered_pages = len(ledger.page_scores or {})
		scores.append({
			"material_id": ledger.material_id,
			"total_correct": ledger.total_correct,
			"total_answered": ledger.total_answered,
			"total_pages": total_pages,
			"is_complete": answered_pages >= total_pages,
			"updated_at": ledger.updated_at,
		})
	return scores


# ---- Material attempts --------------------------------------------------------

def material_questions(db: Session, material_id: int) -> List[Dict[str, Any]]:
	try:
		questions = (
			db.query(QuizQuestion)
			.filter(QuizQuestion.materials_id == material_id)
			.order_by(QuizQuestion.question_number.asc())
			.all()
		)
		options = []
		if questions:
			options = (
				db.query(QuizOption)
				.filter(QuizOption.question_id.in_([q.id for q in questions]))
				.order_by(QuizOption.option_letter.asc())
				.all()
			)
	except SQLAlchemyError as e:
		logger.exception("Failed to fetch questions for material %s", material_id)
		raise StoreError("could not fetch quiz questions") from e
	if not questions:
		raise QuizNotFound(f"no quiz questions for material {material_id}")

	by_question: Dict[int, List[Dict[str, Any]]] = {q.id: [] for q in questions}
	for opt in options:
		by_question[opt.question_id].append({"id": opt.id, "letter": opt.option_letter, "text": opt.option_text})
	return [
		{
			"id": q.id,
			"question_number": q.question_number,
			"question_text": q.question_text,
			"options": by_question[q.id],
		}
		for q in questions
	]


def next_progress(
	previous: Optional[AttemptProgress],
	is_correct: bool,
	xp_per_question: int,
	total_questions: int,
) -> AttemptProgress:
	"""Fold one answer into the attempt ledger of a material.

	An answer arriving after a completed attempt starts a new attempt. Once any
	attempt has completed, xp_earned only holds the best completed score: a
	running retake leaves it alone and a finished retake keeps the maximum.
	"""
	hit = 1 if is_correct else 0
	if previous is None:
		answered, correct, attempts, best, has_completed = 1, hit, 0, 0, False
	else:
		if previous.is_completed:
			answered, correct = 1, hit
		else:
			answered, correct = previous.questions_answered + 1, previous.correct_answers + hit
		attempts = previous.completed_attempts or 0
		if previous.is_completed:
			# rows completed before completed_attempts existed carry 0
			attempts = max(attempts, 1)
		best = previous.xp_earned or 0
		has_completed = attempts > 0

	completed = answered >= total_questions
	attempt_xp = correct * xp_per_question
	if not has_completed:
		xp = attempt_xp
	elif completed:
		xp = max(attempt_xp, best)
	else:
		xp = best

	return AttemptProgress(
		questions_answered=answered,
		correct_answers=correct,
		total_questions=total_questions,
		xp_earned=xp,
		is_completed=completed,
		completed_attempts=attempts + (1 if completed else 0),
	)


def record_attempt_answer(
	db: Session,
	user_id: str,
	material_id: int,
	question_id: int,
	selected_option_id: int,
) -> AttemptAnswerResult:
	if not user_id or not material_id or not question_id or not selected_option_id:
		raise ValidationError("Missing required fields")

	try:
		question = db.get(QuizQuestion, question_id)
		option = db.get(QuizOption, selected_option_id)
		correct_option = (
			db.query(QuizOption)
			.filter(QuizOption.question_id == question_id, QuizOption.is_correct.is_(True))
			.first()
		)
		row = (
			db.query(UserMaterialQuizProgress)
			.filter(UserMaterialQuizProgress.user_id == user_id, UserMaterialQuizProgress.materials_id == material_id)
			.first()
		)
	except SQLAlchemyError as e:
		logger.exception("Failed to load quiz state for user %s material %s", user_id, material_id)
		raise StoreError("could not load quiz state") from e
	if question is None or question.materials_id != material_id:
		raise QuizNotFound(f"question {question_id} not found for material {material_id}")
	if option is None or option.question_id != question_id:
		raise ValidationError(f"option {selected_option_id} does not belong to question {question_id}")

	is_correct = bool(option.is_correct)
	db.merge(UserQuizAnswer(
		user_id=user_id,
		question_id=question_id,
		selected_option_id=selected_option_id,
		is_correct=is_correct,
		answered_at=datetime.utcnow(),
	))

	previous = None
	if row is None:
		row = UserMaterialQuizProgress(user_id=user_id, materials_id=material_id)
		db.add(row)
	else:
		previous = AttemptProgress(
			questions_answered=row.questions_answered or 0,
			correct_answers=row.correct_answers or 0,
			total_questions=row.total_questions,
			xp_earned=row.xp_earned or 0,
			is_completed=bool(row.is_completed),
			completed_attempts=row.completed_attempts or 0,
		)
	progress = next_progress(previous, is_correct, settings.xp_per_question, settings.questions_per_attempt)
	row.questions_answered = progress.questions_answered
	row.correct_answers = progress.correct_answers
	row.total_questions = progress.total_questions
	row.xp_earned = progress.xp_earned
	row.is_completed = progress.is_completed
	row.completed_attempts = progress.completed_attempts
	if progress.is_completed:
		row.completed_at = datetime.utcnow()
	_commit(db, "quiz progress")

	return AttemptAnswerResult(
		is_correct=is_correct,
		xp_earned=settings.xp_per_question if is_correct else 0,
		correct_option_id=correct_option.id if correct_option is not None else selected_option_id,
		progress=progress,
	)
