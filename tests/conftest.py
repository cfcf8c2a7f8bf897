import pytest
from click.testing import CliRunner

from fold_anywhere.config import MarkerConfig


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def config() -> MarkerConfig:
    """Default marker configuration."""
    return MarkerConfig()
