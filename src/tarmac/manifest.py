"""
Sync manifest -- what was uploaded, and under which config.

The manifest lives next to the project as ``tarmac-manifest.toml``.
It is read once at the start of a run and written back wholesale
at the end of a successful one. Nothing ever merges into it.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Optional, Union

import tomli_w
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_serializer,
    model_validator,
)

from .asset_name import AssetName

logger = logging.getLogger("tarmac.manifest")

MANIFEST_FILENAME = "tarmac-manifest.toml"

# Validation context flag: group tables come straight from the file.
FLATTENED_GROUPS = "flattened_groups"


class ManifestError(Exception):
    """Base class for manifest load/save failures."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        super().__init__(message)
        self.file_path = file_path

    def is_not_found(self) -> bool:
        """True when the manifest simply does not exist yet."""
        return False


class ManifestNotFoundError(ManifestError):
    """No manifest in the project folder. Callers treat this as a first run."""

    def __init__(self, file_path: Path):
        super().__init__(f"Manifest not found: {file_path}", file_path)

    def is_not_found(self) -> bool:
        return True


class ManifestDeserializeError(ManifestError):
    """The manifest exists but is not valid TOML or does not match the schema."""

    def __init__(self, file_path: Path, source: Exception):
        super().__init__(f"Could not parse manifest {file_path}: {source}", file_path)
        self.source = source


class ManifestIoError(ManifestError):
    """The filesystem refused to read or write the manifest."""

    def __init__(self, file_path: Path, source: Exception):
        super().__init__(f"Manifest I/O failed for {file_path}: {source}", file_path)
        self.source = source


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class InputConfig(BaseModel):
    """Hierarchical per-input config snapshot.

    Owned by the project config layer; every key is kept so a later run
    can tell when a config change alone invalidates an upload.
    """

    model_config = ConfigDict(extra="allow")

    packable: bool = False


class GroupConfig(BaseModel):
    """Group/packing config snapshot. Opaque to the manifest."""

    model_config = ConfigDict(extra="allow")


class ImageSlice(BaseModel):
    """Region of a packed sheet holding one input's pixels."""

    min: tuple[NonNegativeInt, NonNegativeInt]
    max: tuple[NonNegativeInt, NonNegativeInt]

    @field_validator("min", "max")
    @classmethod
    def _fits_u32(cls, value: tuple[int, int]) -> tuple[int, int]:
        if any(coord > 0xFFFF_FFFF for coord in value):
            raise ValueError("slice coordinates must fit in 32 bits")
        return value


class InputManifest(BaseModel):
    """Upload record for a single input image."""

    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True)

    # Hex digest of the input contents at last upload.
    uploaded_hash: Optional[str] = None
    uploaded_id: Optional[NonNegativeInt] = None
    uploaded_slice: Optional[ImageSlice] = None
    uploaded_config: Optional[InputConfig] = None

    @model_validator(mode="after")
    def _slice_needs_id(self) -> "InputManifest":
        if self.uploaded_slice is not None and self.uploaded_id is None:
            raise ValueError("uploaded-slice requires an uploaded-id")
        return self


class GroupManifest(BaseModel):
    """State of one group as of the last sync.

    On disk the group's config keys sit directly in the group table
    alongside ``inputs`` and ``outputs``.
    """

    inputs: list[AssetName] = Field(default_factory=list)
    outputs: list[NonNegativeInt] = Field(default_factory=list)
    config: GroupConfig = Field(default_factory=GroupConfig)

    @model_validator(mode="before")
    @classmethod
    def _gather_config(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data

        # A file table is always flattened, even when a config key is named "config".
        flattened = bool(info.context and info.context.get(FLATTENED_GROUPS))
        nested = (
            not flattened
            and isinstance(data.get("config"), (GroupConfig, dict))
            and set(data) <= {"inputs", "outputs", "config"}
        )
        if nested:
            return data

        data = dict(data)
        data["config"] = {
            key: data.pop(key)
            for key in list(data)
            if key not in ("inputs", "outputs")
        }
        return data

    @field_validator("inputs", "outputs")
    @classmethod
    def _ordered_set(cls, value: list) -> list:
        return sorted(set(value))

    @model_serializer(mode="wrap")
    def _flatten_config(self, handler) -> dict[str, Any]:
        data = handler(self)
        config = data.pop("config", None) or {}
        return {**config, **data}


class Manifest(BaseModel):
    """Everything Tarmac knows about previous uploads of a project."""

    groups: dict[str, GroupManifest] = Field(default_factory=dict)
    inputs: dict[AssetName, InputManifest] = Field(default_factory=dict)

    @classmethod
    def read_from_folder(cls, folder_path: Union[str, Path]) -> "Manifest":
        """Load the manifest stored in a project folder.

        Raises:
            ManifestNotFoundError: No manifest file exists.
            ManifestDeserializeError: The file is corrupt.
            ManifestIoError: The file could not be read.
        """
        file_path = Path(folder_path) / MANIFEST_FILENAME

        try:
            contents = file_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ManifestNotFoundError(file_path) from exc
        except OSError as exc:
            raise ManifestIoError(file_path, exc) from exc
        except UnicodeDecodeError as exc:
            raise ManifestDeserializeError(file_path, exc) from exc

        try:
            manifest = cls.model_validate(
                tomllib.loads(contents), context={FLATTENED_GROUPS: True}
            )
        except (tomllib.TOMLDecodeError, ValidationError) as exc:
            raise ManifestDeserializeError(file_path, exc) from exc

        logger.debug(
            "Loaded manifest %s (%d inputs, %d groups)",
            file_path, len(manifest.inputs), len(manifest.groups),
        )
        return manifest

    def write_to_folder(self, folder_path: Union[str, Path]) -> Path:
        """Replace the manifest in a project folder with this one.

        Raises:
            ManifestIoError: The file could not be written.
        """
        file_path = Path(folder_path) / MANIFEST_FILENAME
        tmp_path = file_path.with_suffix(".toml.tmp")

        try:
            tmp_path.write_text(self.to_toml(), encoding="utf-8")
            tmp_path.replace(file_path)
        except OSError as exc:
            raise ManifestIoError(file_path, exc) from exc

        logger.debug("Wrote manifest %s", file_path)
        return file_path

    def to_toml(self) -> str:
        """Serialize deterministically: sorted keys, absent values omitted."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        ordered = {
            "groups": {name: data["groups"][name] for name in sorted(data["groups"])},
            "inputs": {name: data["inputs"][name] for name in sorted(data["inputs"])},
        }
        return tomli_w.dumps(ordered)
