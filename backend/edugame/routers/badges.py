from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import badges
from ..badges import BadgeRecord
from ..db import get_db
from ..errors import GamificationError
from ..levels import LevelInfo, level_badge_info, level_info
from .errors import http_error

router = APIRouter(tags=["badges"])


@router.get("/levels/{total_xp}", response_model=LevelInfo)
async def get_level(total_xp: int):
	if total_xp < 0:
		raise HTTPException(status_code=400, detail="total_xp must be >= 0")
	return level_info(total_xp)


@router.get("/levels/{level}/style")
async def get_level_style(level: int):
	return level_badge_info(level)


@router.get("/badges", response_model=List[BadgeRecord])
async def list_badges(db: Session = Depends(get_db)):
	try:
		return badges.all_badges(db)
	except GamificationError as e:
		raise http_error(e)


@router.get("/badges/by-level/{level}", response_model=BadgeRecord)
async def get_badge_by_level(level: int, db: Session = Depends(get_db)):
	if level < 1:
		raise HTTPException(status_code=400, detail="Invalid level")
	try:
		return badges.badge_for_level(db, level)
	except GamificationError as e:
		raise http_error(e)


@router.get("/badges/unlocked/{level}", response_model=List[BadgeRecord])
async def get_unlocked_badges(level: int, db: Session = Depends(get_db)):
	if level < 1:
		raise HTTPException(status_code=400, detail="Invalid level")
	try:
		return badges.unlocked_badges_for_level(db, level)
	except GamificationError as e:
		raise http_error(e)


@router.get("/badges/{badge_id}", response_model=BadgeRecord)
async def get_badge(badge_id: int, db: Session = Depends(get_db)):
	try:
		return badges.badge_by_id(db, badge_id)
	except GamificationError as e:
		raise http_error(e)
