"""FastAPI application exposing the NGO REST API."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from .config import Settings, load_settings
from .db import Database
from .envelope import ErrorMessage, SuccessMessage, failure, success
from .errors import NgoError
from .news_client import NewsFeedClient
from .service import AttendanceService, Clock, NewsService, UserService, make_clock

logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    name: str
    email: str
    level: Optional[str] = None


class LevelRequest(BaseModel):
    level: str


def create_app(
    settings: Optional[Settings] = None,
    *,
    clock: Optional[Clock] = None,
    news_client: Optional[NewsFeedClient] = None,
) -> FastAPI:
    settings = settings or load_settings()
    database = Database(settings.database_path)
    news_client = news_client or NewsFeedClient(
        settings.news_generator_url,
        timeout=settings.news_fetch_timeout,
        max_response_bytes=settings.news_max_response_bytes,
    )
    users = UserService(database)
    attendance = AttendanceService(database, users, clock or make_clock(settings.tzinfo))
    news = NewsService(database, news_client)

    app = FastAPI(title="NGO API", version="1.0.0")

    @app.exception_handler(NgoError)
    async def ngo_error_handler(request: Request, exc: NgoError) -> JSONResponse:
        if exc.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status, content=failure(exc.status, exc.message))

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=failure(exc.status_code, str(exc.detail)))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ErrorMessage.INVALID_REQUEST
        return JSONResponse(status_code=error.status, content=failure(error.status, error.message))

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        await news_client.close()

    def get_users() -> UserService:
        return users

    def get_attendance() -> AttendanceService:
        return attendance

    def get_news() -> NewsService:
        return news

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    # region Users
    @app.post("/users", status_code=status.HTTP_201_CREATED)
    def register_user(body: RegisterRequest, svc: UserService = Depends(get_users)) -> dict[str, object]:
        user = svc.register_user(body.name, body.email, body.level)
        return success(SuccessMessage.REGISTER_USER_SUCCESS, {"user_id": user.id})

    @app.get("/user/{user_id}")
    def get_user(user_id: int, svc: UserService = Depends(get_users)) -> dict[str, object]:
        user = svc.require_user(user_id)
        data = {"user_id": user.id, "user_name": user.name, "email": user.email, "level": user.level}
        return success(SuccessMessage.GET_USER_SUCCESS, data)

    @app.patch("/user/{user_id}/level")
    def patch_user_level(
        user_id: int, body: LevelRequest, svc: UserService = Depends(get_users)
    ) -> dict[str, object]:
        return success(SuccessMessage.PATCH_USER_LEVEL_SUCCESS, svc.patch_user_level(user_id, body.level))

    @app.delete("/user/{user_id}")
    def withdraw_user(user_id: int, svc: UserService = Depends(get_users)) -> dict[str, object]:
        svc.withdraw_user(user_id)
        return success(SuccessMessage.WITHDRAWAL_USER_SUCCESS)

    # endregion

    # region Attendance
    @app.get("/user/{user_id}/attendance")
    def get_all_attendance(
        user_id: int, svc: AttendanceService = Depends(get_attendance)
    ) -> dict[str, object]:
        return success(SuccessMessage.GET_USER_ATTENDANCE_SUCCESS, svc.get_all_attendance(user_id))

    @app.get("/user/{user_id}/attendance/recent")
    def get_recent_attendance(
        user_id: int, svc: AttendanceService = Depends(get_attendance)
    ) -> dict[str, object]:
        return success(SuccessMessage.GET_USER_ATTENDANCE_SUCCESS, svc.get_recent_attendance(user_id))

    @app.post("/user/{user_id}/attendance", status_code=status.HTTP_201_CREATED)
    def post_attendance(
        user_id: int, svc: AttendanceService = Depends(get_attendance)
    ) -> dict[str, object]:
        record = svc.post_attendance(user_id)
        return success(SuccessMessage.POST_USER_ATTENDANCE_SUCCESS, record.to_dict())

    # endregion

    # region News
    @app.get("/news")
    def get_today_news(level: str, svc: NewsService = Depends(get_news)) -> dict[str, object]:
        return success(SuccessMessage.GET_TODAY_NEWS_SUCCESS, svc.get_today_news(level))

    @app.post("/news")
    async def post_today_news(svc: NewsService = Depends(get_news)) -> dict[str, object]:
        saved = await svc.trigger_news_ingestion()
        return success(SuccessMessage.POST_TODAY_NEWS_SUCCESS, {"saved": saved})

    # endregion

    return app


__all__ = ["create_app"]
