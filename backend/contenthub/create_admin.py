"""管理者アカウント作成スクリプト

使い方: python -m contenthub.create_admin admin@example.com
既存ユーザーなら管理者に昇格する。ログインは通常どおり認証コードで行う。
"""
import argparse

from contenthub.core.database import SessionLocal
from contenthub.services.auth_service import get_user_by_email, create_user


def promote_or_create_admin(db, email: str) -> tuple[str, bool]:
    """(メールアドレス, 新規作成したか) を返す"""
    user = get_user_by_email(db, email, include_deleted=True)
    if user is None:
        user = create_user(db, email, role="admin")
        return user.email, True

    user.role = "admin"
    user.deleted_at = None
    db.commit()
    return user.email, False


def main(argv=None):
    parser = argparse.ArgumentParser(description="管理者アカウントを作成・昇格する")
    parser.add_argument("email")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        email, created = promote_or_create_admin(db, args.email)
        if created:
            print(f"管理者作成完了: email={email}")
        else:
            print(f"管理者に昇格しました: email={email}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
