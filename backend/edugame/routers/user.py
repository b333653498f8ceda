from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..badges import update_user_badge
from ..db import get_db
from ..errors import GamificationError
from ..settings import settings
from ..stats import user_stats
from ..xp import leaderboard
from .errors import http_error

router = APIRouter(prefix="/user", tags=["user"])


class UpdateBadgeRequest(BaseModel):
	user_id: Optional[str] = None


@router.get("/stats")
async def get_stats(user_id: Optional[str] = None, db: Session = Depends(get_db)):
	if not user_id:
		raise HTTPException(status_code=400, detail="user_id is required")
	try:
		return user_stats(db, user_id)
	except GamificationError as e:
		raise http_error(e)


@router.post("/update-badge")
async def post_update_badge(req: UpdateBadgeRequest, db: Session = Depends(get_db)):
	if not req.user_id:
		raise HTTPException(status_code=400, detail="user_id is required")
	try:
		result = update_user_badge(db, req.user_id)
	except GamificationError as e:
		raise http_error(e)
	return {
		"success": True,
		"badge": result.badge.model_dump(),
		"level": result.level.level,
		"level_name": result.level.level_name,
	}


@router.get("/leaderboard")
async def get_leaderboard(limit: Optional[int] = None, db: Session = Depends(get_db)):
	size = limit if limit and limit > 0 else settings.leaderboard_size
	try:
		return {"leaderboard": leaderboard(db, size)}
	except GamificationError as e:
		raise http_error(e)
