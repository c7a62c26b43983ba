"""
Data model for candidate images returned by the image-search provider.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """
    A candidate image descriptor.

    Immutable once received. Identity is ``id``: two items with the same id
    are the same candidate regardless of drift in the other fields.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque provider id, unique within a result set", min_length=1)
    title: str = Field(default="", description="Image title (possibly empty)")
    thumbnail_ref: str = Field(default="", description="Thumbnail URL")
    full_ref: str = Field(default="", description="Full-size image URL")
    creator: str = Field(default="", description="Creator display name")
    creator_url: Optional[str] = Field(default=None, description="Creator profile URL")
    license: str = Field(default="", description="License code, e.g. 'by-sa'")
    license_version: Optional[str] = Field(default=None, description="License version, e.g. '4.0'")
    source_name: Optional[str] = Field(default=None, description="Upstream collection name")

    def attribution(self) -> str:
        """Human-readable credit line: ``by <creator> · <LICENSE> <version> · <source>``."""
        parts = [f"by {self.creator or 'unknown'}"]
        license_label = self.license.upper()
        if self.license_version:
            license_label = f"{license_label} {self.license_version}"
        if license_label:
            parts.append(license_label)
        if self.source_name:
            parts.append(self.source_name)
        return " · ".join(parts)
