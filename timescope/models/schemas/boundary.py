from pydantic import BaseModel, ConfigDict, Field


class BoundaryOptions(BaseModel):
    """Per-boundary overrides passed when declaring a scope.

    Leaving ``column`` unset selects the conventional column name; setting it
    to ``None`` explicitly disables the boundary.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    column: str | None = Field(default=None, description="Column name, or None to disable the boundary")
    null: bool | None = Field(default=None, description="Nullability override; skips the schema lookup")

    @property
    def disabled(self) -> bool:
        return "column" in self.model_fields_set and self.column is None

    @property
    def nullable_override(self) -> bool | None:
        if "null" in self.model_fields_set:
            return self.null
        return None
