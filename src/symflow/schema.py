from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .model import Dependency, DependencyType

# -------------------- JSON graph file --------------------

class DependencyModel(BaseModel):
    type: DependencyType
    label: str = Field(min_length=1)
    scope: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v):
        return DependencyType.parse(v)

    def to_dependency(self) -> Dependency:
        return Dependency(self.type, self.label, self.scope)


class JobModel(BaseModel):
    id: int
    name: Optional[str] = None
    deps: list[DependencyModel] = Field(default_factory=list)


class GraphFile(BaseModel):
    jobs: list[JobModel]

    @field_validator("jobs")
    @classmethod
    def _unique_ids(cls, jobs: list[JobModel]) -> list[JobModel]:
        ids = [j.id for j in jobs]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"Duplicate job ids found: {dupes}")
        return jobs
