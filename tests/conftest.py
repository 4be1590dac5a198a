from __future__ import annotations

from pathlib import Path

import pytest

from modgen.schema import Schema
from tests._fixtures.sample_schema import sample_schema
from tests._fixtures.workspace_builder import WorkspaceBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a reusable workspace builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def schema() -> Schema:
    """Provide the shared sample engine API schema."""
    return sample_schema()
