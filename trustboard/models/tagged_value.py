"""Tagged JSON values returned by the Flow script-execution API.

Every value travels as ``{"type": ..., "value": ...}``. Numbers (UFix64,
Int, UInt64) stay strings so no precision is lost in transport. The set of
variants is closed: an unknown ``type`` fails validation instead of being
passed through.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Tagged(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class StringValue(_Tagged):
    type: Literal["String"] = "String"
    value: str


class AddressValue(_Tagged):
    type: Literal["Address"] = "Address"
    value: str


class UFix64Value(_Tagged):
    type: Literal["UFix64"] = "UFix64"
    value: str = Field(description="Fixed-point decimal as string")


class IntValue(_Tagged):
    type: Literal["Int"] = "Int"
    value: str


class UInt64Value(_Tagged):
    type: Literal["UInt64"] = "UInt64"
    value: str


class BoolValue(_Tagged):
    type: Literal["Bool"] = "Bool"
    value: bool


class OptionalValue(_Tagged):
    """``value`` of None means absence, not an error."""
    type: Literal["Optional"] = "Optional"
    value: Optional["TaggedValue"] = None


class ArrayValue(_Tagged):
    type: Literal["Array"] = "Array"
    value: list["TaggedValue"]


class StructField(_Tagged):
    name: str
    value: "TaggedValue"


class StructBody(_Tagged):
    id: str
    fields: list[StructField]


class StructValue(_Tagged):
    type: Literal["Struct"] = "Struct"
    value: StructBody

    @property
    def fields(self) -> list[StructField]:
        return self.value.fields


class DictionaryEntry(_Tagged):
    key: "TaggedValue"
    value: "TaggedValue"


class DictionaryValue(_Tagged):
    type: Literal["Dictionary"] = "Dictionary"
    value: list[DictionaryEntry]


TaggedValue = Annotated[
    Union[
        StringValue,
        AddressValue,
        UFix64Value,
        IntValue,
        UInt64Value,
        BoolValue,
        OptionalValue,
        ArrayValue,
        StructValue,
        DictionaryValue,
    ],
    Field(discriminator="type"),
]

for _model in (OptionalValue, ArrayValue, StructField, StructBody, StructValue,
               DictionaryEntry, DictionaryValue):
    _model.model_rebuild()

tagged_value_adapter: TypeAdapter[TaggedValue] = TypeAdapter(TaggedValue)


def to_python(value: Optional[TaggedValue]):
    """Project a tagged tree onto plain Python values.

    Numeric strings are kept as strings; structs become dicts keyed by
    field name.
    """
    if value is None:
        return None
    if isinstance(value, OptionalValue):
        return to_python(value.value)
    if isinstance(value, ArrayValue):
        return [to_python(v) for v in value.value]
    if isinstance(value, StructValue):
        return {f.name: to_python(f.value) for f in value.fields}
    if isinstance(value, DictionaryValue):
        return {to_python(e.key): to_python(e.value) for e in value.value}
    return value.value
