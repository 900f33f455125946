"""
Pydantic schemas for the content module
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List, Union


class ResourceId(str, Enum):
    """Resource collections kept inside the composite document"""
    SITE_CONTENT = "site-content"
    EVENTS = "events"
    NEWS = "news"
    GALLERY_PHOTOS = "gallery-photos"
    VIDEOS = "videos"
    DRIVERS = "drivers"


KNOWN_RESOURCES: List[str] = [resource.value for resource in ResourceId]


# Site content (pages -> sections / images)
class Section(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    type: Optional[str] = None  # "text" | "image"
    label: Optional[str] = None
    value: Optional[Any] = None
    url: Optional[str] = None
    order: Optional[float] = None


class PageImage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    path: Optional[str] = None
    alt: Optional[str] = None
    type: Optional[str] = None  # "local" | "remote"
    order: Optional[float] = None


class Page(BaseModel):
    """Editable page of the public site (sections hold az/ru text blocks)"""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    page_id: Optional[Union[str, int]] = None
    title: Optional[str] = None
    sections: Optional[List[Section]] = None
    images: Optional[List[PageImage]] = None
    active: Optional[bool] = None


# Driver standings
class Driver(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    points: Optional[float] = None
    rank: Optional[int] = None


class DriverCategory(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    drivers: Optional[List[Driver]] = None


# Item schema per resource; resources not listed accept any JSON value
RESOURCE_ITEM_SCHEMAS: Dict[str, type] = {
    ResourceId.SITE_CONTENT.value: Page,
    ResourceId.DRIVERS.value: DriverCategory,
}

# List-valued fields of schema-checked items; non-list values are coerced to []
RESOURCE_LIST_FIELDS: Dict[str, tuple] = {
    ResourceId.SITE_CONTENT.value: ("sections", "images"),
    ResourceId.DRIVERS.value: ("drivers",),
}


class ContentStruct(BaseModel):
    """Composite document holding every resource collection"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_version: int = Field(0, alias="schemaVersion")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    resources: Dict[str, List[Any]] = Field(default_factory=dict)


# Responses
class SaveResponse(BaseModel):
    success: bool


class DriversSaveResponse(BaseModel):
    success: bool
    data: List[Any]


class PingResponse(BaseModel):
    pong: bool
    time: str


class DbStatusResponse(BaseModel):
    status: str
    details: str
    healthy: bool
