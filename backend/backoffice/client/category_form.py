"""Form state for the add/edit category dialog."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from slugify import slugify

from backoffice.client.api import CategoriesAPI


@dataclass
class CategoryForm:
    name: str = ""
    slug: str = ""
    description: str = ""
    image_url: str = ""
    parent_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = 0
    category_id: Optional[int] = None  # Set when editing
    slug_overridden: bool = False

    @classmethod
    def for_edit(cls, category: Dict[str, Any]) -> "CategoryForm":
        return cls(
            name=category.get("name") or "",
            slug=category.get("slug") or "",
            description=category.get("description") or "",
            image_url=category.get("image_url") or "",
            parent_id=category.get("parent_id"),
            is_active=bool(category.get("is_active", True)),
            sort_order=category.get("sort_order") or 0,
            category_id=category["id"],
            slug_overridden=True,
        )

    @classmethod
    def for_subcategory(cls, parent: Dict[str, Any]) -> "CategoryForm":
        return cls(parent_id=parent["id"])

    @property
    def is_edit(self) -> bool:
        return self.category_id is not None

    def set_name(self, name: str):
        """Update the name; the slug follows it until edited by hand."""
        self.name = name
        if not self.slug_overridden:
            self.slug = slugify(name)

    def set_slug(self, slug: str):
        self.slug = slug
        self.slug_overridden = bool(slug)
        if not slug:
            self.slug = slugify(self.name)

    def validate(self) -> Optional[str]:
        if not self.name.strip():
            return "Category name is required"
        if self.is_edit and self.parent_id == self.category_id:
            return "Category cannot be its own parent"
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name.strip(),
            "slug": self.slug or slugify(self.name),
            "description": self.description or None,
            "image_url": self.image_url or None,
            "parent_id": self.parent_id,
            "is_active": self.is_active,
            "sort_order": self.sort_order,
        }

    async def submit(self) -> Dict[str, Any]:
        """
        Create or update the category.

        Raises:
            ValueError: If the form is invalid
            ApiError: If the server rejects the request
        """
        error = self.validate()
        if error:
            raise ValueError(error)

        if self.is_edit:
            return await CategoriesAPI.update_category(self.category_id, self.to_payload())
        return await CategoriesAPI.create_category(self.to_payload())
