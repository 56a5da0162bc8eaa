"""Shared test fixtures for tarmac."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Union

import pytest
import requests


def _make_response(
    status: int = 200,
    body: Union[bytes, str] = b"",
    headers: Optional[dict[str, str]] = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    return response


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Build canned ``requests.Response`` objects."""
    return _make_response


@pytest.fixture
def session() -> requests.Session:
    """A real session; tests patch its ``send`` so nothing leaves the box."""
    return requests.Session()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide a project folder with a small manifest in it."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "tarmac-manifest.toml").write_text(
        """\
[groups.ui]
inputs = ["assets/ui/a.png", "assets/ui/b.png"]
outputs = [200]
max-spritesheet-size = [1024, 1024]

[inputs."assets/icon.png"]
uploaded-hash = "deadbeef"
uploaded-id = 100

[inputs."assets/ui/a.png"]
uploaded-hash = "aaaa"
uploaded-id = 200

[inputs."assets/ui/a.png".uploaded-slice]
min = [0, 0]
max = [32, 32]

[inputs."assets/ui/b.png"]
uploaded-hash = "bbbb"
uploaded-id = 200

[inputs."assets/ui/b.png".uploaded-slice]
min = [32, 0]
max = [64, 32]

[inputs."assets/new.png"]
""",
        encoding="utf-8",
    )
    return project
