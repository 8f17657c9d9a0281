from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, detail or "Not found", headers)

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_403_FORBIDDEN, detail or "Forbidden", headers)

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail or "Bad request", headers)

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail or "Unauthorized", headers)

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_409_CONFLICT, detail or "Conflict", headers)

class ServiceUnavailableException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, detail or "Service unavailable error", headers)
