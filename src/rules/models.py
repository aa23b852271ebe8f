from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ValueTypeName = Literal["select", "multiselect", "date", "number", "text"]
OperatorName = Literal[
    "is",
    "isNot",
    "contains",
    "notContains",
    "equals",
    "notEquals",
    "greaterThan",
    "lessThan",
    "before",
    "after",
    "between",
]


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class FilterRules(BaseModel):
    max_depth: int = Field(default=8, ge=1, le=32)


class SavedViewRules(BaseModel):
    max_name_length: int = Field(default=80, ge=1)
    max_views_per_resource: int = Field(default=50, ge=1)


class FieldRule(BaseModel):
    id: str = Field(min_length=1)
    label: str
    type: ValueTypeName
    operators: list[OperatorName] = Field(default_factory=list)
    options: list[str] = Field(default_factory=list)
    related_entity: str | None = None
    related_entity_label: str | None = None
    filter_key: str | None = None


class Rules(BaseModel):
    project: ProjectRules
    filters: FilterRules = Field(default_factory=FilterRules)
    saved_views: SavedViewRules = Field(default_factory=SavedViewRules)
    catalogs: dict[str, list[FieldRule]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _unique_field_ids(self) -> "Rules":
        for resource_key, fields in self.catalogs.items():
            ids = [f.id for f in fields]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(f"catalogs.{resource_key} has duplicate field ids: {duplicates}")
        return self
