from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from contenthub.core.database import Base
from contenthub.models.wenjuan import wenjuan_categories


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, comment="分類名 (論理削除済みを含め一意)")
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)

    wenjuans = relationship("Wenjuan", secondary=wenjuan_categories, back_populates="categories")
