"""Operator input for credentials, two-factor codes and remote selection."""

import sys
import time
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, TextIO

import requests

from ..messages import Messages
from .models import Credentials


logger = logging.getLogger(__name__)


class PromptChannel:
    """Process-wide console input channel with an explicit lifecycle.

    One channel is shared by every prompt in a run (see
    :func:`get_prompt_channel`) instead of wrapping stdin anew for each
    question. The channel is paused after every answer and resumed by the
    next question; once closed it refuses further prompts.
    """

    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"

    def __init__(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None):
        self._input = input_stream
        self._output = output_stream
        self.state = self.CLOSED

    def open(self) -> None:
        if self.state == self.CLOSED:
            self._input = self._input or sys.stdin
            self._output = self._output or sys.stdout
        self.state = self.OPEN

    def pause(self) -> None:
        if self.state == self.OPEN:
            self.state = self.PAUSED

    def resume(self) -> None:
        if self.state == self.CLOSED:
            raise RuntimeError("Prompt channel is closed")
        self.state = self.OPEN

    def close(self) -> None:
        self.state = self.CLOSED

    def ask(self, question: str) -> str:
        """Print ``question`` and return one line of input without its newline.

        Returns an empty string at end of input.

        Raises:
            RuntimeError: If the channel has been closed
        """
        if self.state == self.CLOSED:
            raise RuntimeError("Prompt channel is closed")
        self.resume()
        try:
            self.write(question)
            line = self._input.readline()
        finally:
            self.pause()
        return line.rstrip("\r\n")

    def write(self, text: str) -> None:
        self._output.write(text)
        self._output.flush()


_channel: Optional[PromptChannel] = None


def get_prompt_channel() -> PromptChannel:
    """Get the global prompt channel, opening it on first use."""
    global _channel
    if _channel is None:
        _channel = PromptChannel()
    if _channel.state == PromptChannel.CLOSED:
        _channel.open()
    return _channel


def close_prompt_channel() -> None:
    if _channel is not None:
        _channel.close()


class Prompter(ABC):
    """Source of credentials and two-factor codes for the auth flow."""

    @abstractmethod
    def prompt_credentials(self) -> Credentials:
        pass

    @abstractmethod
    def prompt_two_factor_code(self) -> str:
        """Return the code Apple pushed to a trusted device.

        Only called once the flow has detected a two-factor challenge.
        """
        pass


class ConsolePrompter(Prompter):
    """Asks the operator on the console."""

    def __init__(self, channel: Optional[PromptChannel] = None):
        self._channel = channel

    @property
    def channel(self) -> PromptChannel:
        return self._channel or get_prompt_channel()

    def prompt_credentials(self) -> Credentials:
        apple_id = self.channel.ask(Messages.PROMPT_APPLE_ID).strip()
        password = self.channel.ask(Messages.PROMPT_PASSWORD).strip()
        return Credentials(apple_id=apple_id, password=password)

    def prompt_two_factor_code(self) -> str:
        return self.channel.ask(Messages.PROMPT_2FA_CODE).strip()

    def prompt_select_remote(self, remotes: List[str], default_remote: Optional[str] = None) -> str:
        """Show a numbered menu of remotes and return the chosen name.

        Pressing Enter picks ``default_remote`` when it is in the list; any
        other invalid answer asks again.

        Args:
            remotes: Remote names to choose from
            default_remote: Remote preselected for an empty answer

        Returns:
            str: The selected remote name
        """
        channel = self.channel
        channel.write(Messages.AVAILABLE_REMOTES + "\n")
        for i, name in enumerate(remotes, start=1):
            marker = " (default)" if name == default_remote else ""
            channel.write(f"  {i}) {name}{marker}\n")

        default_index = remotes.index(default_remote) + 1 if default_remote in remotes else None
        hint = f" [{default_index}]" if default_index else ""

        while True:
            answer = channel.ask(Messages.PROMPT_SELECT_REMOTE.format(hint=hint)).strip()

            if not answer and default_index is not None:
                return remotes[default_index - 1]

            if answer.isdigit() and 1 <= int(answer) <= len(remotes):
                return remotes[int(answer) - 1]

            channel.write(f"  Please enter a number between 1 and {len(remotes)}.\n")


class WebhookPrompter(ConsolePrompter):
    """Console credentials, two-factor code polled from a webhook.

    Useful when the code is relayed from a phone automation rather than
    typed in by hand.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: int = 120,
        poll_interval: int = 2,
        channel: Optional[PromptChannel] = None,
    ):
        """Initialize webhook prompter.

        Args:
            webhook_url: URL returning ``{"code": "123456"}`` once a code is available
            timeout: Maximum seconds to wait for a code (default: 120)
            poll_interval: Seconds between polling attempts (default: 2)
            channel: Console channel used for credentials
        """
        super().__init__(channel)
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.poll_interval = poll_interval

    def prompt_two_factor_code(self) -> str:
        """Poll the webhook for a two-factor code.

        Returns:
            str: The code from the webhook

        Raises:
            TimeoutError: If no code arrives within the timeout
        """
        logger.info(f"Waiting up to {self.timeout}s for 2FA code from webhook")
        start_time = time.time()

        while time.time() - start_time < self.timeout:
            try:
                response = requests.get(self.webhook_url, timeout=5)
                response.raise_for_status()
                data = response.json()

                if isinstance(data, dict) and data.get("code"):
                    return str(data["code"]).strip()

            except (requests.RequestException, ValueError) as e:
                # Keep polling, the relay may not be up yet
                logger.warning(f"Webhook poll failed: {e}")

            time.sleep(self.poll_interval)

        raise TimeoutError(f"2FA code not received within {self.timeout} seconds")
