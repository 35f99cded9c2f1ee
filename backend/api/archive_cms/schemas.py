from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from archive_cms.content import ContentItem


class ArchiveIndexIn(BaseModel):
    """
    Fields are optional here so a missing one reaches the handler and gets the
    envelope's "all fields required" message instead of a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    class_name: Optional[str] = Field(None, alias="Class")
    web_name: Optional[str] = Field(None, alias="WebName")
    org_name: Optional[str] = Field(None, alias="OrgName")
    org_web_link: Optional[str] = Field(None, alias="OrgWebLink")

    def missing_fields(self) -> List[str]:
        missing = []
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if not value:
                missing.append(field.alias or name)
        return missing


class ArchiveIndexOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    class_name: str = Field(..., alias="Class")
    web_name: str = Field(..., alias="WebName")
    org_name: str = Field(..., alias="OrgName")
    org_web_link: str = Field(..., alias="OrgWebLink")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class ArchiveEnvelope(BaseModel):
    success: bool = True
    data: ArchiveIndexOut


class ArchiveListEnvelope(BaseModel):
    success: bool = True
    data: List[ArchiveIndexOut]


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str


class ContentFeedEnvelope(BaseModel):
    success: bool = True
    data: List[ContentItem]
    error: Optional[str] = None
