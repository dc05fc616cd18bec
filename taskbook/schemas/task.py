from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class TaskInput(BaseModel):
    """Fields a caller may set on create and update."""
    title: str = ""
    description: str = ""
    status: str = "Pending"
    priority: str = "Medium"
    date: str = ""


class TaskRecord(BaseModel):
    """Complete task record returned by the task gateway."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: str
    status: str
    priority: str
    date: str
    month: int
    year: int
    user_id: str = Field(alias="userId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
