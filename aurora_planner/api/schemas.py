from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlannerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str
    suggestion_id: Optional[str] = Field(None, alias="suggestionId")
    user_id: Optional[str] = Field(None, alias="userId", description="Target user; service tokens only.")


class CreateTaskRequest(BaseModel):
    title: str
    scheduled_date: datetime
    description: Optional[str] = None
    priority: Literal["low", "medium", "high"] = "medium"
    category: Optional[str] = None
    is_outdoor: bool = False


class CompleteTaskRequest(BaseModel):
    completed: bool = True


class ImportTaskItem(CreateTaskRequest):
    notion_id: str = Field(..., min_length=1)


class ImportTasksRequest(BaseModel):
    tasks: List[ImportTaskItem]
