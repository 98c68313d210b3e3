"""サービス層の業務エラー。main.py の例外ハンドラで {"detail": ...} に変換する"""
from fastapi import Request
from fastapi.responses import JSONResponse


class ContentHubError(Exception):
    """業務エラーの基底クラス"""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailedError(ContentHubError):
    """入力値・業務ルール違反 (400)"""

    status_code = 400


class NotFoundError(ContentHubError):
    """対象なし・削除済み (404)"""

    status_code = 404


class PermissionDeniedError(ContentHubError):
    """操作権限なし (403)"""

    status_code = 403


class AnswerCountMismatchError(ValidationFailedError):
    """回答数と質問数の不一致"""

    def __init__(self, answer_count: int, question_count: int):
        super().__init__(f"回答数({answer_count})と質問数({question_count})が一致しません")
        self.answer_count = answer_count
        self.question_count = question_count


async def contenthub_error_handler(request: Request, exc: ContentHubError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
