from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SAEnum, ForeignKey, func
from contenthub.core.database import Base


class Blog(Base):
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(50), nullable=True)
    tags = Column(String(200), nullable=True, comment="カンマ区切りタグ")
    status = Column(SAEnum("draft", "published", name="blog_status"), nullable=False, default="draft")
    likes = Column(Integer, nullable=False, default=0, server_default="0")

    # 所有者 (権限チェックは user_id のみで判定)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(100), nullable=False, comment="作成者メール (非正規化)")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)
