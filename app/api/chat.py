"""Endpoint for company questions answered from the reference tables."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.core.providers import get_chat_service
from app.infra.llm_client import RateLimitedError
from app.retrieval.models import ChatResult
from app.services.chat_service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

RATE_LIMITED_MESSAGE = "Hệ thống đang quá tải, Anh/Chị vui lòng thử lại sau ít phút."
INTERNAL_ERROR_MESSAGE = "Lỗi nội bộ server khi xử lý câu hỏi."
MISSING_MESSAGE = "Thiếu trường 'message' trong body."
CHAT_PATH = "/chat"


class ChatRequest(BaseModel):
    # Optional so a missing field is answered with 400 instead of a 422 schema error.
    message: Optional[str] = Field(None, description="Câu hỏi của người dùng")
    device_id: Optional[str] = Field(None, description="Định danh thiết bị gửi câu hỏi")


class ChatResponse(BaseModel):
    reply: str
    section: int
    section_label: str
    download_url: Optional[str] = None
    model: str
    device_id: Optional[str] = None


@router.post(CHAT_PATH, response_model=ChatResponse, status_code=status.HTTP_200_OK)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    message = (request.message or "").strip()
    if not message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=MISSING_MESSAGE,
        )

    try:
        result: ChatResult = await service.answer(message, device_id=request.device_id)
    except RateLimitedError as exc:
        logger.warning("chat rate limited after retries: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=RATE_LIMITED_MESSAGE,
        ) from exc
    except Exception as exc:
        logger.exception("chat failed for message=%r: %s", message[:200], exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        ) from exc

    return ChatResponse(
        reply=result.reply,
        section=int(result.topic),
        section_label=result.topic.label,
        download_url=result.download_url,
        model=result.model,
        device_id=result.device_id,
    )


async def chat_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer unreadable /chat bodies (absent, not JSON, not an object) like a missing message."""

    if request.url.path.rstrip("/") != CHAT_PATH:
        return await request_validation_exception_handler(request, exc)
    logger.info("chat request rejected: %s", exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": MISSING_MESSAGE},
    )
