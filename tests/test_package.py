"""Package metadata tests."""

from click.testing import CliRunner

import simsmods
from simsmods.cli import cli


def test_version_option_matches_package_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert simsmods.__version__ in result.output
