from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
from jose import jwt
import re
from academy.core.config import settings

ALGORITHM = settings.JWT_ALGORITHM
SECRET_KEY = settings.JWT_SECRET

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp", "heic", "heif"]


def create_access_token(
    subject: Union[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Mint a token shaped like the identity provider's (used by scripts and tests)."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode = {"exp": expire, "sub": str(subject), "role": "authenticated"}
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    return jwt.decode(
        token,
        SECRET_KEY,
        algorithms=[ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        options=options,
    )


def sanitize_input(text: Optional[str], max_length: int = 2000) -> Optional[str]:
    """Trim free text, drop null bytes and collapse blanks to None."""
    if text is None:
        return None

    text = text.replace("\x00", "").strip()
    if not text:
        return None

    if len(text) > max_length:
        text = text[:max_length]
    return text


def normalize_phone(value: Optional[str]) -> str:
    """Keep digits only (``010-1234-5678`` -> ``01012345678``)."""
    if not value:
        return ""
    return re.sub(r"\D", "", value)


def validate_file_extension(filename: str, allowed_extensions: list) -> bool:
    if not filename:
        return False

    ext = filename.split(".")[-1].lower() if "." in filename else ""
    return ext in [e.lower().lstrip(".") for e in allowed_extensions]


def is_image_attachment(filename: str, mime_type: Optional[str]) -> bool:
    if mime_type:
        return mime_type.lower().startswith("image/")
    return validate_file_extension(filename, IMAGE_EXTENSIONS)
