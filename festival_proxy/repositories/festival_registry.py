"""
Festival registry repository.

Loads the festival registry once, validates it against the registry models
and keeps the original bytes so they can be served verbatim. The registry
is read-only for the lifetime of the process.
"""

import json
from importlib import resources
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from festival_proxy.errors import RegistryError
from festival_proxy.models.festival import FestivalRegistry

logger = structlog.get_logger(__name__)

PACKAGED_REGISTRY = "festivals.json"


class FestivalRegistryRepository:
    """Read-only access to the embedded festival registry."""

    def __init__(self, raw: bytes, registry: FestivalRegistry, source: str = "<memory>"):
        """
        Initialize the repository from already-validated content.

        Args:
            raw: Registry document exactly as it will be served
            registry: Parsed and validated registry
            source: Where the document came from (for logs)
        """
        self.raw = raw
        self.registry = registry
        self.source = source

    @classmethod
    def from_bytes(cls, raw: bytes, source: str = "<memory>") -> "FestivalRegistryRepository":
        """
        Parse and validate a registry document.

        Args:
            raw: JSON document bytes
            source: Where the document came from (for error messages)

        Returns:
            Repository wrapping the document

        Raises:
            RegistryError: If the document is not valid JSON or fails validation
        """
        try:
            document = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RegistryError(f"{source}: invalid JSON: {e}") from e

        try:
            registry = FestivalRegistry.model_validate(document)
        except ValidationError as e:
            raise RegistryError(f"{source}: {e}") from e

        logger.info(
            "festival_registry_loaded",
            source=source,
            version=registry.version,
            festivals=len(registry.festivals),
            default_festival_id=registry.default_festival_id,
        )
        return cls(raw, registry, source)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "FestivalRegistryRepository":
        """
        Load the registry from a file, or from the packaged copy.

        Args:
            path: Optional path to a festivals.json file

        Returns:
            Repository wrapping the document

        Raises:
            RegistryError: If the file cannot be read or fails validation
        """
        if path is None:
            resource = resources.files("festival_proxy.data").joinpath(PACKAGED_REGISTRY)
            source = f"package:{PACKAGED_REGISTRY}"
            try:
                raw = resource.read_bytes()
            except OSError as e:
                raise RegistryError(f"{source}: {e}") from e
        else:
            source = str(path)
            try:
                raw = Path(path).read_bytes()
            except OSError as e:
                raise RegistryError(f"{source}: {e}") from e

        return cls.from_bytes(raw, source)

    @property
    def default_festival_id(self) -> str:
        return self.registry.default_festival_id
