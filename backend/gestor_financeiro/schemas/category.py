"""
Category and subcategory Pydantic schemas for API validation.
"""

from pydantic import BaseModel, Field
from typing import Optional


class CategoryBase(BaseModel):
    """Base category schema."""
    name: str = Field(..., min_length=1, max_length=100)


class CategoryCreate(CategoryBase):
    """Schema for creating a category."""
    pass


class CategoryUpdate(CategoryBase):
    """Schema for renaming a category."""
    pass


class CategoryResponse(CategoryBase):
    """Schema for category response."""
    id: str

    class Config:
        from_attributes = True


class CategoryList(BaseModel):
    """Schema for listing categories."""
    items: list[CategoryResponse]
    total: int


class SubcategoryBase(BaseModel):
    """Base subcategory schema."""
    name: str = Field(..., min_length=1, max_length=100)
    category_id: str


class SubcategoryCreate(SubcategoryBase):
    """Schema for creating a subcategory."""
    pass


class SubcategoryUpdate(BaseModel):
    """Schema for updating a subcategory."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category_id: Optional[str] = None


class SubcategoryResponse(SubcategoryBase):
    """Schema for subcategory response."""
    id: str
    category_name: Optional[str] = None

    class Config:
        from_attributes = True


class SubcategoryList(BaseModel):
    """Schema for listing subcategories."""
    items: list[SubcategoryResponse]
    total: int
