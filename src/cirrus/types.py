from collections.abc import (
    Mapping,
    Sequence,
)
from typing import (
    Any,
)

PrimitiveJSON = str | int | float | bool | None

# Not every instance of Mapping or Sequence can be fed to json.dump() but those
# two generic types are the most specific *immutable* super-types of `list`,
# `tuple` and `dict`:

AnyJSON3 = Sequence[Any] | Mapping[str, Any] | PrimitiveJSON
AnyJSON2 = Sequence[AnyJSON3] | Mapping[str, AnyJSON3] | PrimitiveJSON
AnyJSON1 = Sequence[AnyJSON2] | Mapping[str, AnyJSON2] | PrimitiveJSON
AnyJSON = Sequence[AnyJSON1] | Mapping[str, AnyJSON1] | PrimitiveJSON
JSON = Mapping[str, AnyJSON]
JSONs = Sequence[JSON]
CompositeJSON = JSON | Sequence[AnyJSON]

# For mutable JSON we can be more specific and use dict and list:

AnyMutableJSON3 = list[Any] | dict[str, Any] | PrimitiveJSON
AnyMutableJSON2 = list[AnyMutableJSON3] | dict[str, AnyMutableJSON3] | PrimitiveJSON
AnyMutableJSON1 = list[AnyMutableJSON2] | dict[str, AnyMutableJSON2] | PrimitiveJSON
AnyMutableJSON = list[AnyMutableJSON1] | dict[str, AnyMutableJSON1] | PrimitiveJSON
MutableJSON = dict[str, AnyMutableJSON]
MutableJSONs = list[MutableJSON]
MutableCompositeJSON = MutableJSON | list[AnyJSON]

#: A path into a tree of nested dictionaries, one key per level
KeyPath = Sequence[str]
