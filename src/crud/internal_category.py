from __future__ import annotations

from src.crud.base import BaseCRUD
from src.models.internal_category import InternalCategory

category_crud: BaseCRUD[InternalCategory] = BaseCRUD(InternalCategory)
