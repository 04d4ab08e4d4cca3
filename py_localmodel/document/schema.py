from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional


# Document attributes and methods; a field with one of these names would be
# shadowed on attribute access.
RESERVED_FIELDS = frozenset((
    "_id", "id", "data", "original", "populated", "collection", "index_key",
    "get", "set", "save", "remove", "populate", "to_record",
))


class SchemaTypes:
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    MIXED = "mixed"
    DATE = "date"

    ALL = (STRING, NUMBER, BOOLEAN, MIXED, DATE)


_TYPE_ALIASES = {
    str: SchemaTypes.STRING,
    int: SchemaTypes.NUMBER,
    float: SchemaTypes.NUMBER,
    bool: SchemaTypes.BOOLEAN,
    datetime: SchemaTypes.DATE,
    date: SchemaTypes.DATE,
    object: SchemaTypes.MIXED,
}


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value) -> datetime:
    """ISO-8601 strings, ``date``/``datetime`` objects or epoch milliseconds.

    Always returns a naive datetime in UTC; offset-free input is taken as UTC.
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return _naive_utc(datetime.fromisoformat(value))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
    raise TypeError(f"Cannot interpret {value!r} as a date")


def _type_tag(field: str, declared) -> str:
    if declared is None:
        return SchemaTypes.STRING
    if declared in SchemaTypes.ALL:
        return declared
    if isinstance(declared, type) and declared in _TYPE_ALIASES:
        return _TYPE_ALIASES[declared]
    raise ValueError(f"Field '{field}' has unknown type {declared!r}")


class FieldSpec:
    __slots__ = ("name", "type", "default", "ref", "foreign_key", "has_default")

    def __init__(self, name: str, descriptor):
        self.name = name
        if isinstance(descriptor, dict):
            self.type = _type_tag(name, descriptor.get("type"))
            self.has_default = "default" in descriptor
            self.default = descriptor.get("default")
            self.ref: Optional[str] = descriptor.get("ref")
            self.foreign_key: Optional[str] = descriptor.get("foreign_key", descriptor.get("foreignKey"))
        else:
            self.type = _type_tag(name, descriptor)
            self.has_default = False
            self.default = None
            self.ref = None
            self.foreign_key = None

    def __repr__(self):
        return f"<FieldSpec {self.name} type={self.type} ref={self.ref}>"


class Schema:
    def __init__(self, fields: dict):
        """
        fields example:
        {
            "name": str,                                  # bare type
            "age": {"type": "number", "default": 18},
            "joined": {"type": SchemaTypes.DATE},
            "owner": {"type": str, "ref": "users"},      # resolved by populate
            "team": {"ref": "teams", "foreign_key": "code"}
        }
        """
        self.fields: Dict[str, Any] = {}
        self.specs: Dict[str, FieldSpec] = {}
        self.add_fields(fields)

    def add_fields(self, properties: dict):
        """Additive merge; existing fields are overwritten, never removed."""
        for name, descriptor in properties.items():
            if name in RESERVED_FIELDS:
                raise ValueError(f"'{name}' is reserved")
            self.specs[name] = FieldSpec(name, descriptor)
            self.fields[name] = descriptor

    @property
    def names(self) -> List[str]:
        return list(self.specs)

    def __contains__(self, name) -> bool:
        return name in self.specs

    def __getitem__(self, name) -> FieldSpec:
        return self.specs[name]

    def default_for(self, name: str, value):
        spec = self.specs.get(name)
        if spec is not None and spec.has_default and not value:
            return spec.default
        return value

    def coerce(self, name: str, value):
        """Force date-typed values to ``datetime``; raises on unparseable dates."""
        spec = self.specs.get(name)
        if spec is not None and value and spec.type == SchemaTypes.DATE:
            return parse_date(value)
        return value

    def convert(self, name: str, value):
        """Fill a missing value from the default, then :meth:`coerce`."""
        spec = self.specs.get(name)
        if spec is None:
            return value
        if value is None and spec.has_default:
            value = spec.default
        return self.coerce(name, value)
