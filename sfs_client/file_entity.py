"""File entities parsed from service download-info responses."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .content_type import ContentType
from .errors import ResultCode, SFSError

logger = logging.getLogger(__name__)


@dataclass
class FileEntity(ABC):
    """A file as described by the service."""

    file_id: str = ""
    url: str = ""
    size_in_bytes: int = 0
    hashes: dict[str, str] = field(default_factory=dict)

    @property
    @abstractmethod
    def content_type(self) -> ContentType:
        """The kind of content this entity belongs to."""


@dataclass
class GenericFileEntity(FileEntity):
    """A file belonging to generic content."""

    @property
    def content_type(self) -> ContentType:
        return ContentType.GENERIC


@dataclass
class ApplicabilityDetailsEntity:
    """Where an app file applies."""

    architectures: list[str] = field(default_factory=list)
    platform_applicability_for_package: list[str] = field(default_factory=list)


@dataclass
class AppFileEntity(FileEntity):
    """A file belonging to app content."""

    file_moniker: str = ""
    applicability_details: ApplicabilityDetailsEntity = field(
        default_factory=ApplicabilityDetailsEntity
    )

    @property
    def content_type(self) -> ContentType:
        return ContentType.APP


def _require(condition: bool, message: str) -> None:
    if not condition:
        logger.error(message)
        raise SFSError(ResultCode.SERVICE_INVALID_RESPONSE, message)


def _is_unsigned(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _string_list(details: dict, key: str) -> list[str]:
    name = f"File.ApplicabilityDetails.{key}"
    _require(key in details, f"Missing {name} in response")
    values = details[key]
    _require(isinstance(values, list), f"{name} is not an array")
    for value in values:
        _require(isinstance(value, str), f"{name} array value is not a string")
    return list(values)


def file_entity_from_json(data: Any) -> FileEntity:
    """Build a file entity from a decoded JSON object.

    Objects with a ``FileMoniker`` key become AppFileEntity, others GenericFileEntity.
    Raises SFSError with SERVICE_INVALID_RESPONSE on malformed input.
    """
    _require(isinstance(data, dict), "File is not a JSON object")
    is_app = "FileMoniker" in data

    _require("FileId" in data, "Missing File.FileId in response")
    _require(isinstance(data["FileId"], str), "File.FileId is not a string")

    _require("Url" in data, "Missing File.Url in response")
    _require(isinstance(data["Url"], str), "File.Url is not a string")

    _require("SizeInBytes" in data, "Missing File.SizeInBytes in response")
    _require(_is_unsigned(data["SizeInBytes"]), "File.SizeInBytes is not an unsigned number")

    _require("Hashes" in data, "Missing File.Hashes in response")
    _require(isinstance(data["Hashes"], dict), "File.Hashes is not an object")
    hashes: dict[str, str] = {}
    for hash_type, hash_value in data["Hashes"].items():
        _require(isinstance(hash_value, str), "File.Hashes object value is not a string")
        hashes[hash_type] = hash_value

    common = dict(
        file_id=data["FileId"],
        url=data["Url"],
        size_in_bytes=data["SizeInBytes"],
        hashes=hashes,
    )
    if not is_app:
        return GenericFileEntity(**common)

    _require(isinstance(data["FileMoniker"], str), "File.FileMoniker is not a string")
    _require("ApplicabilityDetails" in data, "Missing File.ApplicabilityDetails in response")
    details = data["ApplicabilityDetails"]
    _require(isinstance(details, dict), "File.ApplicabilityDetails is not an object")

    architectures = _string_list(details, "Architectures")
    platforms = _string_list(details, "PlatformApplicabilityForPackage")

    return AppFileEntity(
        **common,
        file_moniker=data["FileMoniker"],
        applicability_details=ApplicabilityDetailsEntity(architectures, platforms),
    )


def download_info_response_to_file_entities(data: Any) -> list[FileEntity]:
    """Build file entities from a decoded download-info response (a JSON array)."""
    _require(isinstance(data, list), "Response is not a JSON array")
    entities = []
    for file_data in data:
        _require(isinstance(file_data, dict), "Array element is not a JSON object")
        entities.append(file_entity_from_json(file_data))
    return entities