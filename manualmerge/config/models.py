from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class VariantsConfig(BaseModel):
    a: str = "Z20LET"
    b: str = "Z22SE"

    @field_validator("a", "b")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("variant code cannot be empty or whitespace")
        return v.strip()

    @model_validator(mode="after")
    def validate_distinct(self) -> "VariantsConfig":
        if self.a == self.b:
            raise ValueError(f"variant codes must differ, both are {self.a!r}")
        return self


class MergeConfig(BaseModel):
    id_algorithm: Literal["md5", "sha1", "sha256"] = "md5"
    id_prefix: str = "m_"
    id_length: int = Field(default=12, ge=8, le=32)
    leaf_policy: Literal["union", "strict"] = "union"


class OutputConfig(BaseModel):
    directory: str = "viewer/public/data"
    copy_content: bool = True
    layout: Literal["flat", "namespaced"] = "flat"
    indent: int = Field(default=2, ge=0)


class VehicleConfig(BaseModel):
    make: str = "Vauxhall"
    model: str = "SPEEDSTER"
    year: str = "2003"


class MergeToolConfig(BaseModel):
    variants: VariantsConfig = Field(default_factory=VariantsConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    vehicle: VehicleConfig = Field(default_factory=VehicleConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
