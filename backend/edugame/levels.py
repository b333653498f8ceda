"""XP -> level mapping.

Level 1 covers 0-99 XP, level 2 covers 100-199 XP and so on, up to
MAX_LEVEL which covers everything from 700 XP upwards.
"""
from __future__ import annotations
from typing import Dict, Optional

from pydantic import BaseModel


MAX_LEVEL = 8
XP_PER_LEVEL = 100

LEVEL_NAMES: Dict[int, str] = {
	1: "Pemula",
	2: "Pemula",
	3: "Amatir",
	4: "Amatir",
	5: "Basic",
	6: "Basic",
	7: "Pro",
	8: "Ace",
}

LEVEL_BADGE_INFO: Dict[int, Dict[str, str]] = {
	1: {"name": "Pemula", "color": "from-gray-400 to-gray-600", "icon": "🌱"},
	2: {"name": "Pemula", "color": "from-gray-400 to-gray-600", "icon": "🌱"},
	3: {"name": "Amatir", "color": "from-green-400 to-green-600", "icon": "🌿"},
	4: {"name": "Amatir", "color": "from-green-400 to-green-600", "icon": "🌿"},
	5: {"name": "Basic", "color": "from-blue-400 to-blue-600", "icon": "⭐"},
	6: {"name": "Basic", "color": "from-blue-400 to-blue-600", "icon": "⭐"},
	7: {"name": "Pro", "color": "from-purple-400 to-purple-600", "icon": "💎"},
	8: {"name": "Ace", "color": "from-yellow-400 to-yellow-600", "icon": "👑"},
}


class LevelInfo(BaseModel):
	level: int
	level_name: str
	total_xp: int
	current_level_xp: int
	xp_needed: int
	xp_for_next_level: int
	progress_percentage: int
	is_max_level: bool


def _clean_xp(total_xp: Optional[int]) -> int:
	if not total_xp or total_xp < 0:
		return 0
	return int(total_xp)


def calculate_level(total_xp: Optional[int]) -> int:
	level = _clean_xp(total_xp) // XP_PER_LEVEL + 1
	return min(level, MAX_LEVEL)


def xp_for_current_level(level: int) -> int:
	"""Total XP at which `level` starts."""
	if level <= 1:
		return 0
	return (level - 1) * XP_PER_LEVEL


def xp_for_next_level(level: int) -> int:
	"""Total XP at which the level after `level` starts, 0 at max level."""
	if level >= MAX_LEVEL:
		return 0
	return level * XP_PER_LEVEL


def level_name(level: int) -> str:
	return LEVEL_NAMES.get(level, "Unknown")


def level_badge_info(level: int) -> Dict[str, str]:
	return LEVEL_BADGE_INFO.get(min(max(level, 1), MAX_LEVEL), LEVEL_BADGE_INFO[1])


def level_progress(total_xp: Optional[int], level: int) -> Dict[str, object]:
	total_xp = _clean_xp(total_xp)
	start = xp_for_current_level(level)
	if level >= MAX_LEVEL:
		return {
			"current_level_xp": total_xp - start,
			"xp_needed": 0,
			"xp_for_next_level": 0,
			"progress_percentage": 100,
			"is_max_level": True,
		}
	end = xp_for_next_level(level)
	current = total_xp - start
	needed = end - start
	# Integer floor of current / needed * 100
	percentage = (current * 100) // needed
	return {
		"current_level_xp": current,
		"xp_needed": needed,
		"xp_for_next_level": end,
		"progress_percentage": min(percentage, 100),
		"is_max_level": False,
	}


def level_info(total_xp: Optional[int]) -> LevelInfo:
	total_xp = _clean_xp(total_xp)
	level = calculate_level(total_xp)
	return LevelInfo(
		level=level,
		level_name=level_name(level),
		total_xp=total_xp,
		**level_progress(total_xp, level),
	)
