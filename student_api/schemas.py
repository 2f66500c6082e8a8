"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests.
"""

from pydantic import BaseModel, Field
from typing import Literal, Optional


class StudentIn(BaseModel):
    """Payload for student creation."""
    name: str = Field(min_length=1)
    student_email: str = Field(min_length=1)


class SubjectStatusIn(BaseModel):
    """Payload for updating the status of one of the student's subjects.

    An empty `description` is accepted and stored as no description.
    """
    status: Literal["PENDIENTE", "APROBADA"]
    description: Optional[str] = Field(default=None, max_length=128)


class ErrorOut(BaseModel):
    """Body of every error response."""
    status: int
    code: str
    message: str
