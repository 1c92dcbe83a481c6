import logging
from contextlib import asynccontextmanager
from typing import Type

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, ORJSONResponse

from postboard.core.config import settings
from postboard.core.database import async_engine, init_db
from postboard.dependencies import get_post_service
from postboard.routers.post_router import router as post_router
from postboard.services.post_service import PostService
from postboard.utils.exceptions import (
    ApiError, BadRequestError, ConflictError,
    InternalServerError, NotFoundError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "서버 내부 오류가 발생했습니다."
INVALID_REQUEST_MESSAGE = "요청 형식이 올바르지 않습니다."

# ─── 애플리케이션 수명 주기 이벤트 핸들러 정의 ─────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    앱 시작 시 DB 테이블 생성, 종료 시 커넥션 풀 정리
    """
    await init_db()
    logger.info("DB 초기화 완료")
    yield
    await async_engine.dispose()

# ─── FastAPI 애플리케이션 인스턴스 생성 ─────────────────────────────────────
app = FastAPI(
    title=settings.APP_TITLE,
    description="게시글 작성/삭제 및 좋아요 토글 API",
    version="1.0.0",
    lifespan=lifespan,
)

# ─── 로그 설정 ─────────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# ─── CORS 설정 ─────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,  # 허용 origin 목록은 설정값 사용
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── 예외 클래스 → Status Code 매핑 ───────────────────────────────────────
# 중복 좋아요(ConflictError)도 클라이언트 오류로 400 응답
EXCEPTION_STATUS_MAP: dict[Type[Exception], int] = {
    BadRequestError: 400,
    ConflictError: 400,
    NotFoundError: 404,
    InternalServerError: 500,
}


def status_for(exc: Exception) -> int:
    """
    예외 클래스 계층을 따라 EXCEPTION_STATUS_MAP에서 상태 코드를 찾음 (없으면 500)
    """
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> str:
    """
    동작 확인용 고정 HTML
    """
    return "<h1>Postboard API 서버가 동작 중입니다</h1>"


@app.get("/health")
async def health_check(svc: PostService = Depends(get_post_service)) -> ORJSONResponse:
    """
    서비스 및 DB 연결 상태 확인용 엔드포인트
    """
    result = await svc.health_check()
    status_code = 200 if result["status"] == "healthy" else 503
    return ORJSONResponse(status_code=status_code, content=result)

# ─── 예외 처리 핸들러 등록───────────────────────────────────────────────────
@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError):
    """
    커스텀 ApiError를 일괄 처리
    EXCEPTION_STATUS_MAP에 매핑된 예외라면 해당 상태 코드로, 그렇지 않으면 500으로 반환
    500 응답에는 내부 상세 정보를 담지 않음
    """
    status_code = status_for(exc)
    if status_code >= 500 and not isinstance(exc, InternalServerError):
        logger.error("처리되지 않은 저장소 오류: %s %s → %s", request.method, request.url.path, exc.message)
        message = GENERIC_ERROR_MESSAGE
    else:
        message = exc.message
    return ORJSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """
    JSON 파싱 실패, 필드 타입 불일치 등 요청 검증 오류를 400으로 반환
    """
    logger.info("요청 검증 실패: %s %s → %s", request.method, request.url.path, exc.errors())
    return ORJSONResponse(status_code=400, content={"error": INVALID_REQUEST_MESSAGE})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    """
    예상하지 못한 예외는 로그를 남기고 일반 500 응답으로 반환
    """
    logger.exception("예상하지 못한 오류: %s %s", request.method, request.url.path)
    return ORJSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})

# ─── 라우터 등록 ───────────────────────────────────────────────────────
app.include_router(post_router, prefix="/api")

if __name__ == "__main__":
    uvicorn.run(
        "postboard.main:app",
        host=settings.HOST,
        port=settings.PORT,
    )
