"""
===============================================================================
INPUT SCHEMA: Feedback Submission
===============================================================================

Name:
    Feedback Submission Schema

Responsibilities:
    - Validate a beneficiary feedback submission before it becomes a task
    - Derive the task title when none is given

Collaborators:
    - application/task_service.py: submit_feedback() converts it into a Task
    - domain.entities.TaskType / TaskPriority

Rules:
    - details: 10..1000 chars; location: 2..100 chars; project required
    - phone required (>= 10 chars) when the contact channel is phone
    - priority limited to low/medium/high (urgent is a triage decision)
    - age and gender are optional sensitive demographics
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain.entities import TaskPriority, TaskType

TITLE_MAX_CHARS = 60


class ContactChannel(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    IN_PERSON = "in_person"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


_SUBMITTABLE_PRIORITIES = {TaskPriority.LOW, TaskPriority.MEDIUM, TaskPriority.HIGH}


class FeedbackSubmission(BaseModel):
    """Feedback captured by a focal person."""

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=False)

    project: str = Field(min_length=1)
    feedback_type: TaskType
    details: str = Field(min_length=10, max_length=1000)
    location: str = Field(min_length=2, max_length=100)
    channel: ContactChannel
    phone: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    anonymous: bool = False
    title: Optional[str] = Field(default=None, max_length=200)
    age: Optional[int] = Field(default=None, ge=1, le=120)
    gender: Optional[Gender] = None

    @field_validator("priority")
    @classmethod
    def priority_submittable(cls, v: TaskPriority) -> TaskPriority:
        if v not in _SUBMITTABLE_PRIORITIES:
            raise ValueError("priority must be low, medium, or high")
        return v

    @model_validator(mode="after")
    def phone_required_for_phone_channel(self):
        if self.channel == ContactChannel.PHONE and (
            not self.phone or len(self.phone) < 10
        ):
            raise ValueError(
                "Phone number is required when phone is selected as contact method"
            )
        return self

    def resolved_title(self) -> str:
        """R: Explicit title, else the first line of details (truncated)."""
        if self.title:
            return self.title
        first_line = self.details.splitlines()[0].strip()
        if len(first_line) <= TITLE_MAX_CHARS:
            return first_line
        return first_line[: TITLE_MAX_CHARS - 3].rstrip() + "..."
