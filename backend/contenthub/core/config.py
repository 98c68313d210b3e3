from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """アプリケーション設定"""

    # データベース
    DATABASE_URL: str = "mysql+pymysql://contenthub:contenthub@db:3306/contenthub?charset=utf8mb4"

    # Redis (認証コード保存先)
    REDIS_URL: str = "redis://redis:6379/0"

    # JWT
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24 * 7
    ALLOW_QUERY_TOKEN: bool = True  # ?token= でのトークン受け渡しを許可 (エクスポートのリンク用)

    # Resend
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@example.com"

    # PDF出力 (日本語・中国語を含む場合はTTFフォントを指定)
    PDF_FONT_PATH: str = ""

    # サービス設定
    SITE_NAME: str = "ContentHub"
    ALLOWED_ORIGINS: str = "http://localhost:8000,http://localhost:3000"

    # レート制限
    RATE_LIMIT_ENABLED: bool = True

    # 環境
    ENV: str = "development"
    DEBUG: bool = True
    LOG_FORMAT: str = "json"  # json | text

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
