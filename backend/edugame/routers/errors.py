from fastapi import HTTPException

from ..errors import GamificationError, NotFoundError, StaleWriteError, StoreError, ValidationError


def http_error(exc: GamificationError) -> HTTPException:
	if isinstance(exc, ValidationError):
		return HTTPException(status_code=400, detail=str(exc))
	if isinstance(exc, NotFoundError):
		return HTTPException(status_code=404, detail=str(exc))
	if isinstance(exc, StaleWriteError):
		return HTTPException(status_code=409, detail=str(exc))
	if isinstance(exc, StoreError):
		# Details are in the server log
		return HTTPException(status_code=500, detail="database error")
	return HTTPException(status_code=500, detail="internal error")
