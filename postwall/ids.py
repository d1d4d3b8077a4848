import secrets
import string

POST_ID_LENGTH = 13
POST_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_post_id(length: int = POST_ID_LENGTH) -> str:
    return "".join(secrets.choice(POST_ID_ALPHABET) for _ in range(length))


def generate_edit_id() -> str:
    """Six digit edit code in 100000-999999; never starts with a zero."""
    return str(100000 + secrets.randbelow(900000))
