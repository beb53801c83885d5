"""
Pydantic schemas for domains.

The create form asks for a non-empty name and a color prefixed by '#'.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


COLOR_PATTERN = r"^#[0-9A-Fa-f]{3}([0-9A-Fa-f]{3})?$"


class DomainView(BaseModel):
    id: int
    name: str
    color: Optional[str] = None


class DomainSkillRef(BaseModel):
    id: int
    name: str


class DomainWithSkills(DomainView):
    skills: List[DomainSkillRef] = Field(default_factory=list)


class DomainCreateRequest(BaseModel):
    """
    Request schema for creating a domain.

    Attributes:
        name: Domain name (required, unique)
        color: Display color prefixed by '#' (optional)
    """
    name: str = Field(..., min_length=1, max_length=255)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be blank")
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {"name": "Mobile", "color": "#6186ea"}
        }
    }


class DomainUpdateRequest(BaseModel):
    """Only the fields present in the body are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("name cannot be null or blank")
        return v.strip()
