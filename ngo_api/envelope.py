"""Status/message catalog and the uniform response envelope."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict


class _Message(Enum):
    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message


class SuccessMessage(_Message):
    # User
    REGISTER_USER_SUCCESS = (201, "user registered")
    WITHDRAWAL_USER_SUCCESS = (200, "user withdrawn")
    GET_USER_SUCCESS = (200, "user loaded")
    PATCH_USER_LEVEL_SUCCESS = (200, "user level updated")
    # Attendance
    GET_USER_ATTENDANCE_SUCCESS = (200, "attendance loaded")
    POST_USER_ATTENDANCE_SUCCESS = (201, "attendance recorded")
    # News
    GET_TODAY_NEWS_SUCCESS = (200, "today's news loaded")
    POST_TODAY_NEWS_SUCCESS = (200, "today's news generated")


class ErrorMessage(_Message):
    INVALID_REQUEST = (400, "invalid request")
    USER_NOT_FOUND = (404, "user not found")
    ATTENDANCE_ALREADY_EXIST = (409, "attendance already exists")
    REGISTER_NOT_ALLOW = (409, "registration not allowed")
    NEWS_GENERATION_FAILED = (500, "news generation failed")


def success(message: SuccessMessage, data: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": message.status, "message": message.message}
    if data is not None:
        body["data"] = data
    return body


def failure(status: int, message: str) -> Dict[str, Any]:
    return {"status": status, "message": message}


__all__ = ["SuccessMessage", "ErrorMessage", "success", "failure"]
