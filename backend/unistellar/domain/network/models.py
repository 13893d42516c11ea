"""Records of the academic network as they leave the API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from unistellar.domain.common.ids import Identifier


class Name(BaseModel):
	first: str
	last: str


class User(BaseModel):
	"""An individual student."""

	id: Identifier
	name: Name
	username: str
	university: Identifier
	major: Identifier
	grad_year: int


class University(BaseModel):
	id: Identifier
	name: str
	short_name: Optional[str] = None


class Course(BaseModel):
	"""A course; courses are shared across universities."""

	id: Identifier
	name: str
	code: Optional[str] = None


class Major(BaseModel):
	id: Identifier
	name: str


class Assignment(BaseModel):
	id: Identifier
	name: str
	course: Identifier


class Planning(BaseModel):
	kind: Literal["planning"] = "planning"


class Completed(BaseModel):
	kind: Literal["completed"] = "completed"


class WorkedOn(BaseModel):
	kind: Literal["worked_on"] = "worked_on"
	duration_secs: int = Field(..., ge=0, description="Time spent, in whole seconds")


ActivityData = Annotated[Union[Planning, Completed, WorkedOn], Field(discriminator="kind")]


class Activity(BaseModel):
	"""One entry of a user's activity log against an assignment."""

	model_config = ConfigDict(frozen=True)

	id: Identifier
	user: Identifier
	assignment: Identifier
	created_at: datetime
	data: ActivityData


class Stats(BaseModel):
	assignments_completed: int = Field(..., ge=0)
	secs_worked: int = Field(..., ge=0)


class Follow(BaseModel):
	model_config = ConfigDict(frozen=True)

	follower: Identifier
	followee: Identifier
