"""
Asset names -- the logical key for one input image.

An asset name is the input's path relative to the project root,
always written with forward slashes so manifests diff cleanly
between Windows and Unix checkouts.
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


class AssetName(str):
    """Project-relative, slash-separated path naming one input.

    Subclasses ``str`` so names hash, compare, and sort lexicographically
    and can be used directly as manifest keys.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> "AssetName":
        return super().__new__(cls, value.replace("\\", "/"))

    @classmethod
    def from_paths(cls, root_path: Path, asset_path: Path) -> "AssetName":
        """Build an asset name for a file under a project root.

        Raises:
            ValueError: If ``asset_path`` is not inside ``root_path``.
        """
        relative = PurePath(asset_path).relative_to(root_path)
        return cls(relative.as_posix())

    def __repr__(self) -> str:
        return f"AssetName({str.__repr__(self)})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls, core_schema.str_schema()
        )
