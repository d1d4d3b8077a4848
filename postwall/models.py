from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Post(BaseModel):
    id: str
    alias: str
    avatar: str
    content: str
    timestamp: int
    editId: str


# Request fields are loosely typed; the rules in validation.py decide what
# is acceptable so that every rejection carries a readable message.
class PostCreate(BaseModel):
    alias: Optional[str] = None
    avatar: Optional[str] = None
    content: Optional[str] = None
    editId: Optional[str] = None


class PostUpdate(BaseModel):
    alias: Optional[str] = None
    avatar: Optional[str] = None
    content: Optional[str] = None


class PatchPostRequest(BaseModel):
    editId: Optional[str] = None
    updates: PostUpdate = Field(default_factory=PostUpdate)


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    field: Optional[str] = None

