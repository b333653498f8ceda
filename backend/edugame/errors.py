class GamificationError(Exception):
	"""Base class for failures scoped to a single request."""


class NotFoundError(GamificationError):
	pass


class BadgeNotFound(NotFoundError):
	pass


class QuizNotFound(NotFoundError):
	pass


class ValidationError(GamificationError):
	pass


class StoreError(GamificationError):
	pass


class StaleWriteError(StoreError):
	"""Another request changed the same row between our read and our write."""
