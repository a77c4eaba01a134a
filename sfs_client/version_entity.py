"""Version entities parsed from service version responses."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .content_type import ContentType, validate_content_type
from .errors import ResultCode, SFSError

logger = logging.getLogger(__name__)


@dataclass
class ContentIdEntity:
    """Namespace, name and version identifying a piece of content."""

    name_space: str = ""
    name: str = ""
    version: str = ""


@dataclass
class VersionEntity(ABC):
    """A content version as described by the service."""

    content_id: ContentIdEntity = field(default_factory=ContentIdEntity)

    @property
    @abstractmethod
    def content_type(self) -> ContentType:
        """The kind of content this entity belongs to."""


@dataclass
class GenericVersionEntity(VersionEntity):
    """A version of generic content."""

    @property
    def content_type(self) -> ContentType:
        return ContentType.GENERIC


@dataclass
class AppVersionEntity(VersionEntity):
    """A version of app content, with its update id and prerequisites."""

    update_id: str = ""
    prerequisites: list[GenericVersionEntity] = field(default_factory=list)

    @property
    def content_type(self) -> ContentType:
        return ContentType.APP


def _require(condition: bool, message: str) -> None:
    if not condition:
        logger.error(message)
        raise SFSError(ResultCode.SERVICE_INVALID_RESPONSE, message)


def _content_id(obj: dict, prefix: str) -> ContentIdEntity:
    values = []
    for key in ("Namespace", "Name", "Version"):
        _require(key in obj, f"Missing {prefix}.{key} in response")
        _require(isinstance(obj[key], str), f"{prefix}.{key} is not a string")
        values.append(obj[key])
    return ContentIdEntity(*values)


def version_entity_from_json(data: Any) -> VersionEntity:
    """Build a version entity from a decoded JSON object.

    Objects with an ``UpdateId`` key become AppVersionEntity, others GenericVersionEntity.
    Raises SFSError with SERVICE_INVALID_RESPONSE on malformed input.
    """
    _require(isinstance(data, dict), "Response is not a JSON object")
    is_app = "UpdateId" in data

    _require("ContentId" in data, "Missing ContentId in response")
    content_id = data["ContentId"]
    _require(isinstance(content_id, dict), "ContentId is not a JSON object")
    content = _content_id(content_id, "ContentId")

    if not is_app:
        return GenericVersionEntity(content_id=content)

    _require(isinstance(data["UpdateId"], str), "UpdateId is not a string")
    _require("Prerequisites" in data, "Missing Prerequisites in response")
    _require(isinstance(data["Prerequisites"], list), "Prerequisites is not an array")

    prerequisites = []
    for prereq in data["Prerequisites"]:
        _require(isinstance(prereq, dict), "Prerequisite element is not a JSON object")
        prerequisites.append(GenericVersionEntity(content_id=_content_id(prereq, "Prerequisite")))

    return AppVersionEntity(
        content_id=content,
        update_id=data["UpdateId"],
        prerequisites=prerequisites,
    )


def as_app_version_entity(entity: VersionEntity) -> AppVersionEntity:
    """Return ``entity`` as an app version entity, raising SFSError if it is not one."""
    validate_content_type(entity.content_type, ContentType.APP)
    assert isinstance(entity, AppVersionEntity)
    return entity