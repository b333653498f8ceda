from fastapi import APIRouter

from ..levels import MAX_LEVEL, XP_PER_LEVEL

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
	return {"status": "ok", "max_level": MAX_LEVEL, "xp_per_level": XP_PER_LEVEL}
