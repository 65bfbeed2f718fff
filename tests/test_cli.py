from click.testing import CliRunner

from fixmypidge.cli import cli
from fixmypidge.core.security import decode_session_token


def test_mint_token():
    result = CliRunner().invoke(cli, ["mint-token", "--user-id", "citizen-42"])

    assert result.exit_code == 0
    assert decode_session_token(result.output.strip())["sub"] == "citizen-42"


def test_mint_token_rejects_blank_user():
    result = CliRunner().invoke(cli, ["mint-token", "--user-id", "  "])
    assert result.exit_code != 0
