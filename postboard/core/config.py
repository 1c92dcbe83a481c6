from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path
from functools import lru_cache
from typing import List, Optional

# 프로젝트 루트 디렉토리
BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _resolve_path(path_str: str) -> str:
    """
    입력된 경로가 절대 경로인지 확인하고 상대 경로일 경우 BASE_DIR 기준으로 변환
    """
    path = Path(path_str)
    return str(path if path.is_absolute() else BASE_DIR / path)


class Settings(BaseSettings):
    """
    애플리케이션 환경 설정 모델
    - 환경 변수 및 config/settings.env 파일(있을 경우)을 자동 로드
    """
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / "config" / "settings.env"),
        env_file_encoding="utf-8",
        extra='ignore',
    )

    APP_TITLE: str = Field(
        "Postboard API",
        description="OpenAPI 문서에 표시되는 서비스 이름",
    )

    # Database
    DB_USER:     Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_HOST:     Optional[str] = None
    DB_PORT:     int = 3306
    DB_NAME:     Optional[str] = None
    DATABASE_URL: Optional[str] = Field(
        None,
        description="전체 DB 연결 URL (우선순위: env > MySQL 자동 조합 > SQLite)",
    )
    SQLITE_PATH: str = Field(
        "postboard.db",
        description="DB 서버 설정이 없을 때 사용할 SQLite 파일 경로",
    )
    DB_ECHO: bool = False

    # HTTP
    CORS_ORIGINS: str = Field(
        "http://localhost:3000",
        description="CORS 허용 origin 목록 (쉼표로 구분)",
    )
    HOST: str = "0.0.0.0"
    PORT: int = 8888
    LOG_LEVEL: str = "INFO"

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        SQLAlchemy가 기대하는 비동기 DB 연결 문자열을 반환
        - DATABASE_URL이 있으면 그대로 사용
        - DB_HOST가 있으면 개별 DB 설정값으로 MySQL URL을 조합
        - 둘 다 없으면 로컬 SQLite 파일 사용
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            return (
                f"mysql+asyncmy://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
            )
        return f"sqlite+aiosqlite:///{_resolve_path(self.SQLITE_PATH)}"

    @property
    def cors_origin_list(self) -> List[str]:
        """
        쉼표로 구분된 CORS_ORIGINS 값을 리스트로 변환
        """
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Settings 인스턴스를 싱글톤으로 반환
    최초 호출 시 객체를 생성하고, 이후 캐싱된 인스턴스를 반환
    """
    return Settings()

# 전역 설정 인스턴스
settings = get_settings()
