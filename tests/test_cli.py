import orjson
from typer.testing import CliRunner

from cip.cli.main import app


runner = CliRunner()


def test_score_command_prints_assessment():
    result = runner.invoke(
        app,
        [
            "score",
            "--network-cc", "de",
            "--device-cc", "DE",
            "--timezone", "Europe/Berlin",
            "--language", "de-DE",
            "--datacenter",
        ],
    )

    assert result.exit_code == 0
    assert orjson.loads(result.stdout) == {"score": 4, "flags": ["datacenter_ip"]}


def test_submit_cancel_sends_nothing():
    result = runner.invoke(app, ["submit", "-m", "hello", "--mode", "cancel"])

    assert result.exit_code == 0
    assert "Network address" in result.stdout
    assert "Nothing was sent" in result.stdout


def test_submit_blank_message_exits_before_consent():
    result = runner.invoke(app, ["submit", "-m", "   ", "--mode", "approximate"])
    assert result.exit_code == 2
