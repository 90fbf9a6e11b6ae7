import pytest

from icloud_auth.auth import prompter as prompter_module
from icloud_auth.auth.authenticator import ICloudAuthenticator
from icloud_auth.auth.errors import SignInButtonNotFound
from icloud_auth.messages import Messages

from fakes import FakeDriver, FakePrompter


def test_automated_login_requires_prompter():
    with pytest.raises(ValueError):
        ICloudAuthenticator(FakeDriver())


def test_authenticate_runs_automated_flow():
    messages = []
    driver = FakeDriver(two_factor=True)
    prompter = FakePrompter()

    result = ICloudAuthenticator(driver, prompter, on_step=messages.append).authenticate()

    assert result.trust_token == "trust-123"
    assert prompter.code_prompts == 1
    assert messages[0] == Messages.LAUNCHING_BROWSER
    assert Messages.BANNER not in messages


def test_manual_login_never_prompts():
    driver = FakeDriver()
    prompter = FakePrompter()

    ICloudAuthenticator(driver, prompter, manual=True, on_step=None).authenticate()

    assert prompter.credential_prompts == 0
    assert "enter_apple_id" not in driver.call_names


def test_prompt_channel_closed_after_failure(monkeypatch):
    channel = prompter_module.PromptChannel()
    channel.open()
    monkeypatch.setattr(prompter_module, "_channel", channel)
    driver = FakeDriver(fail_on="navigate_to_sign_in", error=SignInButtonNotFound("sign-in button"))

    with pytest.raises(SignInButtonNotFound):
        ICloudAuthenticator(driver, FakePrompter(), on_step=None).authenticate()

    assert channel.state == prompter_module.PromptChannel.CLOSED
    assert driver.call_names[-1] == "close"
