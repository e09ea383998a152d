from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List

from waypoint.constants import ProjectStatus

class ProjectCreate(BaseModel):
    name: str
    description: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[ProjectStatus] = None

class SprintCreate(BaseModel):
    name: str
    team: List[int] = []
    po_id: Optional[int] = None
    scrum_master_id: Optional[int] = None
    tasks: List[int] = []
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class SprintPatch(BaseModel):
    name: Optional[str] = None
    team: Optional[List[int]] = None
    po_id: Optional[int] = None
    scrum_master_id: Optional[int] = None
    tasks: Optional[List[int]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
