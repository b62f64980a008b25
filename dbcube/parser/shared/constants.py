"""
Constants for the parser module.
"""

# Default folder names
DEFAULT_CUBES_FOLDER = "dbcube"
DEFAULT_TRIGGERS_FOLDER = "triggers"

# Cube file categories and their suffixes
CUBE_CATEGORIES = ("table", "seeder", "trigger")
CUBE_FILE_SUFFIXES = {category: f".{category}.cube" for category in CUBE_CATEGORIES}
TABLE_FILE_MARKER = CUBE_FILE_SUFFIXES["table"]

# Annotations accepted anywhere in a cube file
KNOWN_ANNOTATIONS = [
    "database",
    "table",
    "meta",
    "columns",
    "fields",
    "dataset",
    "beforeAdd",
    "afterAdd",
    "beforeUpdate",
    "afterUpdate",
    "beforeDelete",
    "afterDelete",
    "compute",
    "column",
]

# Column data types
VALID_TYPES = [
    "varchar",
    "int",
    "string",
    "text",
    "boolean",
    "date",
    "datetime",
    "timestamp",
    "decimal",
    "float",
    "double",
    "enum",
    "json",
]

# Entries allowed in an `options: [...]` array
VALID_OPTIONS = [
    "not null",
    "primary",
    "autoincrement",
    "unique",
    "zerofill",
    "index",
    "required",
    "unsigned",
]

# Property names allowed inside the @columns block
VALID_COLUMN_PROPERTIES = [
    "type",
    "length",
    "options",
    "value",
    "defaultValue",
    "foreign",
    "enumValues",
    "description",
]

# Property names allowed inside a `foreign: { ... }` object
VALID_FOREIGN_KEY_PROPERTIES = ["table", "column"]

# Nested blocks that do not declare a column and need no `type`
TYPELESS_BLOCKS = {"foreign", "defaultValue"}

# Number of lines (including the declaring one) searched for a varchar length
VARCHAR_LENGTH_WINDOW = 5

_NUMERIC_TYPES = ["int", "decimal", "float", "double"]
_SCALAR_TYPES = [
    "int",
    "varchar",
    "string",
    "text",
    "boolean",
    "date",
    "datetime",
    "timestamp",
    "decimal",
    "float",
    "double",
]

# Option -> column types it may be applied to. Options missing here are allowed on any type.
OPTION_TYPE_COMPATIBILITY = {
    "zerofill": _NUMERIC_TYPES,
    "unsigned": _NUMERIC_TYPES,
    "autoincrement": ["int"],
    "primary": ["int", "varchar", "string"],
    "not null": _SCALAR_TYPES,
    "unique": ["int", "varchar", "string", "text"],
    "index": ["int", "varchar", "string", "text", "date", "datetime", "timestamp"],
    "required": _SCALAR_TYPES,
}

# Persisted execution order
STATE_FOLDER = ".dbcube"
EXECUTION_ORDER_FILE = "orderexecute.json"
