"""サービス共通処理: ページング"""
from sqlalchemy.orm import Query

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def paginate(q: Query, page: int, page_size: int) -> tuple[list, int]:
    """(該当ページの行, 総件数) を返す"""
    total = q.order_by(None).count()
    if total == 0:
        return [], 0
    items = q.offset((page - 1) * page_size).limit(page_size).all()
    return items, total


def total_pages(total: int, page_size: int) -> int:
    return (total + page_size - 1) // page_size


def pagination_meta(page: int, page_size: int, total: int) -> dict:
    return {
        "current_page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
        "total_count": total,
    }


def like_pattern(keyword: str) -> str:
    """LIKE検索用パターン (ワイルドカード文字はエスケープ)"""
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
