from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import quiz
from ..db import get_db
from ..errors import GamificationError
from .errors import http_error

router = APIRouter(prefix="/quiz", tags=["quiz"])


class SubmitPageAnswerRequest(BaseModel):
	# Optional so that missing fields reach the service check and get a 400
	user_id: Optional[str] = None
	material_id: Optional[int] = None
	page_number: Optional[int] = None
	selected_answer: Optional[int] = None


class PageQuizRequest(BaseModel):
	question: str
	options: List[str]
	correct_answer: int


class AttemptAnswerRequest(BaseModel):
	user_id: Optional[str] = None
	question_id: Optional[int] = None
	selected_option_id: Optional[int] = None


@router.post("/submit")
async def submit_page_answer(req: SubmitPageAnswerRequest, db: Session = Depends(get_db)):
	try:
		result = quiz.submit_page_answer(db, req.user_id, req.material_id, req.page_number, req.selected_answer)
	except GamificationError as e:
		raise http_error(e)
	return {"success": True, "saved": True, **result.model_dump()}


@router.get("/score/{user_id}/{material_id}/{page_number}")
async def get_page_score(user_id: str, material_id: int, page_number: int, db: Session = Depends(get_db)):
	try:
		score = quiz.page_answer(db, user_id, material_id, page_number)
	except GamificationError as e:
		raise http_error(e)
	if score is None:
		return {"answered": False}
	return {"answered": True, **score}


@router.get("/user-scores/{user_id}")
async def get_user_scores(user_id: str, db: Session = Depends(get_db)):
	try:
		return {"scores": quiz.user_material_scores(db, user_id)}
	except GamificationError as e:
		raise http_error(e)


@router.get("/game/{material_id}")
async def get_material_questions(material_id: int, db: Session = Depends(get_db)):
	try:
		return {"material_id": material_id, "questions": quiz.material_questions(db, material_id)}
	except GamificationError as e:
		raise http_error(e)


@router.post("/game/{material_id}")
async def answer_material_question(material_id: int, req: AttemptAnswerRequest, db: Session = Depends(get_db)):
	try:
		result = quiz.record_attempt_answer(db, req.user_id, material_id, req.question_id, req.selected_option_id)
	except GamificationError as e:
		raise http_error(e)
	return result.model_dump()


@router.get("/{material_id}/{page_number}")
async def get_page_quiz(material_id: int, page_number: int, db: Session = Depends(get_db)):
	try:
		return quiz.get_page_quiz(db, material_id, page_number)
	except GamificationError as e:
		raise http_error(e)


@router.put("/{material_id}/{page_number}")
async def put_page_quiz(material_id: int, page_number: int, req: PageQuizRequest, db: Session = Depends(get_db)):
	try:
		return quiz.save_page_quiz(db, material_id, page_number, req.question, req.options, req.correct_answer)
	except GamificationError as e:
		raise http_error(e)
