"""
Argument validation for GraphQL resolvers.

Strawberry input objects are converted to camelCase dictionaries (omitting
fields the client did not send) and validated with pydantic models. Every
violation is reported as an issue whose argument path is rooted at the GraphQL
argument name, e.g. ``["input", "caption"]``.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, TypeVar
from uuid import UUID

import strawberry
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from ..errors import ErrorCode, Issue, TalawaGraphQLError
from ..logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

IMAGE_MIME_TYPES = frozenset({"image/avif", "image/jpeg", "image/png", "image/webp"})


def to_raw_arguments(value: Any) -> Any:
    """Convert a strawberry input object into a plain camelCase structure."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        raw = {}
        for field in dataclasses.fields(value):
            field_value = getattr(value, field.name)
            if field_value is strawberry.UNSET:
                continue
            raw[to_camel(field.name)] = to_raw_arguments(field_value)
        return raw
    if isinstance(value, list):
        return [to_raw_arguments(item) for item in value]
    return value


def parse_arguments(model: type[ModelT], raw: Any, *, root: str) -> ModelT:
    """Validate raw arguments against a model or fail with `invalid_arguments`."""
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise TalawaGraphQLError(
            ErrorCode.INVALID_ARGUMENTS,
            issues=[
                Issue(argument_path=(root, *error["loc"]), message=error["msg"])
                for error in e.errors()
            ],
        ) from e


class _ArgumentsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class CreatePostArguments(_ArgumentsModel):
    caption: str = Field(min_length=1, max_length=2048)
    organization_id: UUID
    is_pinned: bool | None = None
    images: list[Any] | None = None


class RecaptchaArguments(_ArgumentsModel):
    recaptcha_token: str

    @field_validator("recaptcha_token")
    @classmethod
    def token_not_empty(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("too_short", "Recaptcha token is required")
        return value


class ResourceLookupArguments(_ArgumentsModel):
    id: UUID


@dataclass
class ValidatedImage:
    """An uploaded image whose type and size passed validation."""

    filename: str | None
    mime_type: str
    content: bytes


async def validate_images(
    uploads: list[Any] | None, *, max_size: int, path_prefix: tuple[str, ...] = ("input", "images")
) -> tuple[list[ValidatedImage], list[Issue]]:
    """
    Check each upload's declared MIME type and size.

    Invalid uploads are excluded from the returned images; each one produces an
    issue whose path carries its index in the original list.
    """
    images: list[ValidatedImage] = []
    issues: list[Issue] = []

    for index, upload in enumerate(uploads or []):
        if upload is None:
            continue

        mime_type = upload.content_type
        if mime_type not in IMAGE_MIME_TYPES:
            issues.append(
                Issue(
                    argument_path=(*path_prefix, index),
                    message=f"Mime type {mime_type} not allowed for image upload.",
                )
            )
            continue

        content = await upload.read()
        if len(content) > max_size:
            issues.append(
                Issue(
                    argument_path=(*path_prefix, index),
                    message=f"File size exceeds the maximum allowed size of {max_size} bytes.",
                )
            )
            continue

        images.append(ValidatedImage(filename=upload.filename, mime_type=mime_type, content=content))

    return images, issues
