"""
Caller Identity

Identity of the caller on whose behalf a search runs. It is carried in the
request context so that query compilation can see who asked, but nothing in
the neural rewrite path requires it.
"""

from typing import List
from pydantic import BaseModel, Field, ConfigDict


class CallerIdentity(BaseModel):
    """
    Caller identity derived from a verified bearer token.
    """

    username: str = Field(
        ...,
        min_length=1,
        description="User name of the caller.",
    )

    roles: List[str] = Field(
        default_factory=list,
        description="Roles granted to the caller; usable for permission filters.",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
