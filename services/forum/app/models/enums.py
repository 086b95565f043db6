import enum

from sqlalchemy import Enum


class PostType(str, enum.Enum):
    TEXT = "text"


class AnonymityType(str, enum.Enum):
    EVERYONE = "everyone"
    STRANGERS = "strangers"


class DescriptionSectionType(str, enum.Enum):
    TEXT = "text"
    CATEGORY_FILTER = "category_filter"


class RolePermission(str, enum.Enum):
    ALL = "all"
    EDIT_BOARD_DETAILS = "edit_board_details"
    POST_AS_ROLE = "post_as_role"
    EDIT_CATEGORY_TAGS = "edit_category_tags"
    EDIT_CONTENT_NOTICES = "edit_content_notices"


class RestrictionType(str, enum.Enum):
    LOCK_ACCESS = "lock_access"
    DELIST = "delist"


# Board permissions a role can grant, in display order. `all` expands to these;
# `post_as_role` is reported separately as a posting identity.
BOARD_PERMISSIONS: tuple[RolePermission, ...] = (
    RolePermission.EDIT_BOARD_DETAILS,
    RolePermission.EDIT_CATEGORY_TAGS,
    RolePermission.EDIT_CONTENT_NOTICES,
)


def _pg_enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Store the lowercase values the database enum types declare, not member names.
    return Enum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])


# SQLAlchemy Enum instances (reuse across models to avoid duplicate type creation)
post_type_enum = _pg_enum(PostType, "post_type")
anonymity_type_enum = _pg_enum(AnonymityType, "anonymity_type")
description_section_type_enum = _pg_enum(DescriptionSectionType, "board_description_section_type")
