"""Enumerations shared by models and services."""

from enum import Enum


class Visibility(str, Enum):
    """Document visibility."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class PermissionLevel(str, Enum):
    """Access level stored on a permission row."""

    VIEW = "VIEW"
    EDIT = "EDIT"


class Scope(str, Enum):
    """Named candidate-set filters for listings and search."""

    ALL = "all"
    OWNED = "owned"
    SHARED = "shared"
    RECENT = "recent"
    ARCHIVED = "archived"
