import pytest

from icloud_auth import orchestrator
from icloud_auth.auth.errors import TrustCookieTimeout
from icloud_auth.auth.models import AuthResult
from icloud_auth.messages import Messages
from icloud_auth.orchestrator import OrchestrateResult, orchestrate, report_auth_result


RESULT = AuthResult(trust_token="tok", cookies="a=1; X-APPLE-WEBAUTH-HSA-TRUST=tok")
CONFIG = "[iclouddrive]\ntype = iclouddrive\ncookies = old\ntrust_token = old\n"


class Authenticate:
    def __init__(self, result=RESULT, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def test_orchestrate_patches_existing_config():
    authenticate = Authenticate()

    result = orchestrate(authenticate, CONFIG, "iclouddrive")

    assert authenticate.calls == 1
    assert result.rclone_command == (
        "rclone config update iclouddrive cookies='a=1; X-APPLE-WEBAUTH-HSA-TRUST=tok' trust_token='tok'"
    )
    assert result.updated_config_content == (
        "[iclouddrive]\ntype = iclouddrive\ncookies = a=1; X-APPLE-WEBAUTH-HSA-TRUST=tok\ntrust_token = tok\n"
    )


def test_orchestrate_without_config_only_builds_command():
    result = orchestrate(Authenticate(), None, "iclouddrive")

    assert result.updated_config_content is None
    assert "trust_token='tok'" in result.rclone_command


def test_orchestrate_with_config_missing_remote():
    result = orchestrate(Authenticate(), "[gdrive]\ntype = drive\n", "iclouddrive")

    assert result.updated_config_content is None


def test_orchestrate_when_values_already_current():
    current = "[iclouddrive]\ncookies = a=1; X-APPLE-WEBAUTH-HSA-TRUST=tok\ntrust_token = tok\n"

    result = orchestrate(Authenticate(), current, "iclouddrive")

    assert result.updated_config_content == current


def test_orchestrate_propagates_auth_failure():
    authenticate = Authenticate(error=TrustCookieTimeout("trust cookie"))

    with pytest.raises(TrustCookieTimeout):
        orchestrate(authenticate, CONFIG, "iclouddrive")

    assert authenticate.calls == 1


def test_report_writes_config_and_tests_connection(tmp_path, monkeypatch, capsys):
    checked = []
    monkeypatch.setattr(orchestrator, "check_rclone_connection", lambda remote: checked.append(remote) or True)
    path = tmp_path / "rclone.conf"

    report_auth_result(OrchestrateResult("cmd", "patched\n"), path, "photos")

    assert path.read_text() == "patched\n"
    assert checked == ["photos"]
    assert Messages.RCLONE_CONF_UPDATED in capsys.readouterr().out


def test_report_can_skip_connection_test(tmp_path, monkeypatch):
    monkeypatch.setattr(orchestrator, "check_rclone_connection", pytest.fail)

    report_auth_result(OrchestrateResult("cmd", "patched\n"), tmp_path / "rclone.conf", test_connection=False)


def test_report_prints_command_without_config(tmp_path, capsys):
    path = tmp_path / "rclone.conf"

    report_auth_result(OrchestrateResult("rclone config update iclouddrive cookies='c' trust_token='t'", None), path)

    output = capsys.readouterr().out
    assert Messages.RCLONE_COMMAND_INSTRUCTIONS in output
    assert "rclone config update iclouddrive cookies='c' trust_token='t'" in output
    assert not path.exists()
