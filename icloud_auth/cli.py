"""Command-line entry point for the rclone iCloud authenticator."""

import argparse
from pathlib import Path
from typing import List, Optional

from .utils.config import Config, get_config
from .utils.logger import setup_logging, get_logger
from .utils.preferences import Preferences
from .auth.authenticator import ICloudAuthenticator
from .auth.browser_driver import PlaywrightBrowserDriver
from .auth.diagnostics import DiagnosticCapture
from .auth.errors import AuthFlowError
from .auth.prompter import ConsolePrompter, Prompter, WebhookPrompter
from .messages import Messages
from .orchestrator import orchestrate, report_auth_result
from .rclone.config import DEFAULT_REMOTE_NAME, parse_icloud_remotes, validate_icloud_remote
from .rclone.filesystem import read_rclone_config_content
from .remote_selection import NoIcloudRemotesError, run_remote_selection_flow


logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Log in to iCloud in a browser and store the trust token in rclone.conf"
    )

    # Login mode
    parser.add_argument(
        "--manual",
        action="store_true",
        help="Open a visible browser and log in by hand instead of being prompted"
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window during automated login (overrides HEADLESS_MODE)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write checkpoint screenshots and log at DEBUG level"
    )

    # rclone options
    parser.add_argument(
        "--remote",
        type=str,
        help="rclone remote to update (default: ask when rclone.conf has iCloud remotes)"
    )
    parser.add_argument(
        "--rclone-config",
        type=str,
        help="Path to rclone.conf (overrides RCLONE_CONFIG env var)"
    )
    parser.add_argument(
        "--no-test",
        action="store_true",
        help="Skip the 'rclone lsd' connection test after updating rclone.conf"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides LOG_LEVEL env var)"
    )

    return parser.parse_args(argv)


def select_remote(
    args,
    config_content: Optional[str],
    preferences: Preferences,
    prompter: ConsolePrompter,
) -> str:
    """Work out which remote receives the new token.

    An explicit ``--remote`` wins. Otherwise the operator picks one of the
    iCloud remotes in rclone.conf, and the choice is remembered as the next
    default. Without a config file the default remote name is used.
    """
    if args.remote:
        if config_content is not None and not validate_icloud_remote(config_content, args.remote):
            logger.warning(f"Remote '{args.remote}' is not an iclouddrive remote in rclone.conf")
        return args.remote

    if config_content is None:
        return DEFAULT_REMOTE_NAME

    try:
        selection = run_remote_selection_flow(
            parse_icloud_remotes(config_content),
            preferences.get_default_remote(),
            prompter.prompt_select_remote,
        )
    except NoIcloudRemotesError as e:
        print(f"⚠ {e}")
        return DEFAULT_REMOTE_NAME

    preferences.set_default_remote(selection.remote_name)
    return selection.remote_name


def build_prompter(config: Config) -> ConsolePrompter:
    if config.two_factor_method == "webhook":
        return WebhookPrompter(
            config.two_factor_webhook_url,
            timeout=config.two_factor_webhook_timeout,
        )
    return ConsolePrompter()


def build_authenticator(args, config: Config, prompter: Prompter) -> ICloudAuthenticator:
    diagnostics = DiagnosticCapture(enabled=args.debug, directory=config.debug_directory)
    # Manual login always needs a window to type into
    headless = False if (args.manual or args.headed) else config.headless_mode
    driver = PlaywrightBrowserDriver(
        headless=headless,
        timings=config.driver_timings(manual=args.manual),
        diagnostics=diagnostics,
    )
    return ICloudAuthenticator(driver, prompter=prompter, manual=args.manual)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Load configuration
    try:
        config = get_config()
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    # Setup logging
    log_level = "DEBUG" if args.debug else (args.log_level or config.log_level)
    setup_logging(log_level=log_level, log_to_console=True, log_dir=config.log_directory)

    print(Messages.BANNER)

    config_path = Path(args.rclone_config).expanduser() if args.rclone_config else config.rclone_config_path
    try:
        config_content = read_rclone_config_content(config_path)
    except OSError as e:
        print(f"✗ Could not read {config_path}: {e}")
        return 1

    prompter = build_prompter(config)
    remote_name = select_remote(args, config_content, Preferences(config.preferences_file), prompter)
    logger.info(f"Updating remote '{remote_name}' in {config_path}")

    authenticator = build_authenticator(args, config, prompter)

    try:
        result = orchestrate(authenticator.authenticate, config_content, remote_name)
    except AuthFlowError as e:
        print(f"\n✗ Authentication failed at step '{e.step}': {e}")
        return 1
    except Exception as e:
        print(f"\n✗ Authentication error: {e}")
        return 1

    try:
        report_auth_result(result, config_path, remote_name, test_connection=not args.no_test)
    except OSError as e:
        print(f"✗ Could not write {config_path}: {e}")
        print(result.rclone_command)
        return 1

    return 0
