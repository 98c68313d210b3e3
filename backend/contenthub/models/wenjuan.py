from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Enum as SAEnum, ForeignKey, Table, func,
)
from sqlalchemy.orm import relationship
from contenthub.core.database import Base

# 問卷 ⇔ 分類 (多対多)
wenjuan_categories = Table(
    "wenjuan_categories",
    Base.metadata,
    Column("wenjuan_id", Integer, ForeignKey("wenjuans.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)


class Wenjuan(Base):
    __tablename__ = "wenjuans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, comment="質問文のJSON配列")
    status = Column(SAEnum("draft", "published", name="wenjuan_status"), nullable=False, default="draft")
    deadline = Column(DateTime, nullable=True, comment="回答締切 (UTC)")
    is_pinned = Column(Boolean, nullable=False, default=False)

    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(100), nullable=False, comment="作成者メール (非正規化)")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)

    answers = relationship(
        "WenjuanAnswer",
        back_populates="wenjuan",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    categories = relationship("Category", secondary=wenjuan_categories, back_populates="wenjuans")


class WenjuanAnswer(Base):
    __tablename__ = "wenjuan_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wenjuan_id = Column(Integer, ForeignKey("wenjuans.id", ondelete="CASCADE"), nullable=False, index=True)
    # 回答者の判定は user_id で行う (メールアドレスは変更・再利用されうる)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True, comment="回答者ID (旧データはNULL)")
    user_email = Column(String(100), nullable=False, comment="回答者メール (表示用・非正規化)")
    answer = Column(Text, nullable=False, comment="回答のJSON配列 (質問数と同じ長さ)")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)

    wenjuan = relationship("Wenjuan", back_populates="answers")
