"""Field rules for posts.

The ``check_*`` functions are pure: they return ``None`` when the value is
acceptable, or the reason it is not. ``validate_new_post`` and
``validate_updates`` run them in field order (alias, content, avatar, editId)
and raise :class:`ValidationError` for the first failure.
"""
from typing import Any, Optional

import regex

from .errors import ValidationError
from .models import PostCreate, PostUpdate

ALIAS_MAX_LENGTH = 50
CONTENT_MAX_LENGTH = 300

ALIAS_PATTERN = regex.compile(r"[A-Za-z0-9 _-]+")
EDIT_ID_PATTERN = regex.compile(r"[0-9]{6}")
POST_ID_PATTERN = regex.compile(r"[A-Za-z0-9]+")
IMAGE_URL_PATTERN = regex.compile(
    r"https?://.+\.(jpg|jpeg|png|gif|webp)(\?.*)?", regex.IGNORECASE
)
# one pictographic symbol, optionally styled, optionally ZWJ-joined to more
EMOJI_PATTERN = regex.compile(
    r"\p{Extended_Pictographic}(?:\uFE0F|\p{Emoji_Modifier})?"
    r"(?:\u200D\p{Extended_Pictographic}(?:\uFE0F|\p{Emoji_Modifier})?)*"
)

ALIAS_REQUIRED = "Alias is required"
ALIAS_TOO_LONG = f"Alias must be {ALIAS_MAX_LENGTH} characters or less"
ALIAS_BAD_CHARS = "Alias can only contain letters, numbers, spaces, hyphens, and underscores"
CONTENT_REQUIRED = "Content is required"
CONTENT_TOO_LONG = f"Content must be {CONTENT_MAX_LENGTH} characters or less"
AVATAR_INVALID = "Avatar must be an emoji or a valid image URL (jpg, jpeg, png, gif, webp)"
EDIT_ID_REQUIRED = "Edit ID is required"
EDIT_ID_INVALID = "Edit ID must be exactly 6 digits"
POST_ID_INVALID = "Post ID must contain only alphanumeric characters"
UPDATES_EMPTY = "At least one field must be provided for update"


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def check_alias(alias: Any) -> Optional[str]:
    if not isinstance(alias, str) or alias.strip() == "":
        return ALIAS_REQUIRED
    if len(alias) > ALIAS_MAX_LENGTH:
        return ALIAS_TOO_LONG
    if not ALIAS_PATTERN.fullmatch(alias):
        return ALIAS_BAD_CHARS
    return None


def check_content(content: Any) -> Optional[str]:
    # length is measured before trimming
    if not isinstance(content, str) or content.strip() == "":
        return CONTENT_REQUIRED
    if len(content) > CONTENT_MAX_LENGTH:
        return CONTENT_TOO_LONG
    return None


def check_avatar(avatar: Any) -> Optional[str]:
    if not isinstance(avatar, str):
        return AVATAR_INVALID
    value = avatar.strip()
    if IMAGE_URL_PATTERN.fullmatch(value) or EMOJI_PATTERN.fullmatch(value):
        return None
    return AVATAR_INVALID


def check_edit_id(edit_id: Any) -> Optional[str]:
    if is_blank(edit_id):
        return EDIT_ID_REQUIRED
    if not isinstance(edit_id, str) or not EDIT_ID_PATTERN.fullmatch(edit_id):
        return EDIT_ID_INVALID
    return None


def check_post_id(post_id: Any) -> Optional[str]:
    if not isinstance(post_id, str) or not POST_ID_PATTERN.fullmatch(post_id):
        return POST_ID_INVALID
    return None


def _raise_first(checks) -> None:
    for field, reason in checks:
        if reason is not None:
            raise ValidationError(reason, field=field)


def validate_new_post(data: PostCreate) -> dict:
    """Validate a create payload and return its normalized fields.

    A blank ``editId`` means the caller did not pick one, so it comes back as
    ``None`` and the server generates the code.
    """
    edit_id = None if is_blank(data.editId) else data.editId
    _raise_first([
        ("alias", check_alias(data.alias)),
        ("content", check_content(data.content)),
        ("avatar", check_avatar(data.avatar)),
        ("editId", check_edit_id(edit_id) if edit_id is not None else None),
    ])
    return {
        "alias": data.alias.strip(),
        "content": data.content.strip(),
        "avatar": data.avatar.strip(),
        "editId": edit_id,
    }


def validate_updates(updates: PostUpdate) -> dict:
    """Validate only the fields present in a partial update."""
    present = updates.model_dump(exclude_unset=True)
    if not present:
        raise ValidationError(UPDATES_EMPTY, field="updates")
    rules = (("alias", check_alias), ("content", check_content), ("avatar", check_avatar))
    _raise_first([(name, rule(present[name])) for name, rule in rules if name in present])
    return {name: value.strip() for name, value in present.items()}


def require_edit_id(edit_id: Any) -> str:
    _raise_first([("editId", check_edit_id(edit_id))])
    return edit_id


def require_post_id(post_id: Any) -> str:
    _raise_first([("id", check_post_id(post_id))])
    return post_id
