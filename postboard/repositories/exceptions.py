"""
Repository 계층 예외 클래스들과 DB 고유 에러 코드 분류
"""

from sqlalchemy.exc import IntegrityError

from postboard.utils.exceptions import ApiError

# 드라이버별 제약 위반 식별 정보
MYSQL_DUPLICATE_ENTRY = 1062
MYSQL_NO_REFERENCED_ROW = (1216, 1452)
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"


class RepositoryError(ApiError):
    """Repository 관련 기본 예외 (그 외 모든 저장소 실패)"""
    pass


class DatabaseCommitError(RepositoryError):
    """DB 커밋 관련 예외"""
    pass


class DuplicateEntityError(RepositoryError):
    """유니크 제약 위반 예외"""
    pass


class EntityNotFoundError(RepositoryError):
    """엔티티 조회 실패 또는 참조 대상 없음 예외"""
    pass


def _driver_code(orig: BaseException):
    """
    DBAPI 예외에서 드라이버 에러 코드(MySQL errno 또는 PostgreSQL SQLSTATE) 추출
    """
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def classify_integrity_error(exc: IntegrityError) -> str:
    """
    IntegrityError를 'unique' / 'foreign_key' / 'other' 중 하나로 분류
    - MySQL: errno 1062 / 1452
    - PostgreSQL: SQLSTATE 23505 / 23503
    - SQLite: 메시지 시그니처
    """
    orig = exc.orig if exc.orig is not None else exc
    code = _driver_code(orig)

    if code == MYSQL_DUPLICATE_ENTRY or code == PG_UNIQUE_VIOLATION:
        return "unique"
    if code in MYSQL_NO_REFERENCED_ROW or code == PG_FOREIGN_KEY_VIOLATION:
        return "foreign_key"

    message = str(orig).lower()
    if "unique constraint" in message or "duplicate" in message:
        return "unique"
    if "foreign key constraint" in message:
        return "foreign_key"
    return "other"
