"""Pydantic models for per-variant viewer manifests."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceNode(BaseModel):
    """A node in a variant's table-of-contents tree."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    parent_id: str | None = Field(None, alias="parentId")
    children: list[str] = Field(default_factory=list)
    is_leaf: bool = Field(False, alias="isLeaf")

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def coerce_parent_id(cls, v: Any) -> str | None:
        # Scraped ids are sometimes numeric
        return None if v is None else str(v)

    @field_validator("children", mode="before")
    @classmethod
    def coerce_children(cls, v: Any) -> list[str]:
        if v is None:
            return []
        return [str(c) for c in v]


class SourceTree(BaseModel):
    """Read-only node mapping plus ordered root ids."""

    nodes: dict[str, SourceNode] = Field(default_factory=dict)
    roots: list[str] = Field(default_factory=list)

    @field_validator("roots", mode="before")
    @classmethod
    def coerce_roots(cls, v: Any) -> list[str]:
        if v is None:
            return []
        return [str(r) for r in v]


class Section(BaseModel):
    """A rendered leaf section as listed by the transform step."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", description="Section slug; empty when the transform had none")
    title: str = ""
    content_type: str = Field("generic", alias="contentType")
    filename: str | None = None
    html_filename: str | None = Field(None, alias="htmlFilename")


class ReferenceCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tools_count: int = Field(0, alias="toolsCount")
    torque_values_count: int = Field(0, alias="torqueValuesCount")
    pictograms_count: int = Field(0, alias="pictogramsCount")
    glossary_terms_count: int = Field(0, alias="glossaryTermsCount")


class VariantManifest(BaseModel):
    """One variant's manifest.json as written by the content transform."""

    model_config = ConfigDict(populate_by_name=True)

    vehicle: dict[str, Any] = Field(default_factory=dict)
    sections: list[Section] = Field(default_factory=list)
    tree: SourceTree = Field(default_factory=SourceTree)
    toc_id_to_slug: dict[str, str | None] = Field(default_factory=dict, alias="tocIdToSlug")
    content_type_stats: dict[str, int] = Field(
        default_factory=dict, alias="contentTypeStats"
    )
    references: ReferenceCounts = Field(default_factory=ReferenceCounts)

    @field_validator("vehicle", "toc_id_to_slug", "content_type_stats", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def section_by_slug(self) -> dict[str, Section]:
        return {s.id: s for s in self.sections if s.id}
