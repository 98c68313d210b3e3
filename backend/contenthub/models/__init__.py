# 全モデルをインポート (Alembic autogenerate用)
from contenthub.models.user import User
from contenthub.models.blog import Blog
from contenthub.models.task import Task
from contenthub.models.wenjuan import Wenjuan, WenjuanAnswer, wenjuan_categories
from contenthub.models.category import Category

__all__ = [
    "User",
    "Blog",
    "Task",
    "Wenjuan",
    "WenjuanAnswer",
    "wenjuan_categories",
    "Category",
]
