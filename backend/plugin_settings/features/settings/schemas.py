"""Pydantic schemas for the settings HTTP API."""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

SettingValue = Union[StrictBool, StrictInt, StrictStr]


class SettingValueUpdate(BaseModel):
    """Schema for updating a single setting."""

    value: Any = Field(..., description="Raw value; sanitized against the schema")


class SettingValueResponse(BaseModel):
    """Schema for a single setting response."""

    key: str
    value: SettingValue


class SchemaFieldResponse(BaseModel):
    """Schema for one option in the describe-schema response."""

    key: str
    type: str = Field(..., description="string, boolean, integer or enum")
    description: str
    default: SettingValue
    enum_values: Optional[List[SettingValue]] = Field(None, alias="enumValues")
    current_value: SettingValue = Field(..., alias="currentValue")

    model_config = ConfigDict(populate_by_name=True)


class SettingsErrorResponse(BaseModel):
    """Schema for error details returned by settings endpoints."""

    detail: str
