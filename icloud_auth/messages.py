"""Operator-facing messages printed while the flow runs."""


class Messages:
    """Constants for console output."""
    BANNER = "=== rclone iCloud Authenticator ==="
    LAUNCHING_BROWSER = "\nLaunching headless browser..."
    LAUNCHING_VISIBLE_BROWSER = "\nLaunching browser window..."
    NAVIGATING_TO_ICLOUD = "Navigating to iCloud..."
    ENTERING_APPLE_ID = "Entering Apple ID..."
    ENTERING_PASSWORD = "Entering password..."
    CHECKING_FOR_TWO_FACTOR = "Checking for 2FA..."
    TWO_FACTOR_REQUIRED = "Two-factor authentication required."
    SUBMITTING_TWO_FACTOR = "Submitting 2FA code..."
    WAITING_FOR_AUTH = "Waiting for authentication to complete..."
    MANUAL_LOGIN = "Please log in via the browser window."

    PROMPT_APPLE_ID = "Apple ID email: "
    PROMPT_PASSWORD = "Password (will be visible): "
    PROMPT_2FA_CODE = "\n2FA code (from your iPhone): "
    PROMPT_SELECT_REMOTE = "\nSelect remote{hint}: "

    AVAILABLE_REMOTES = "\nAvailable iCloud remotes:"
    NO_ICLOUD_REMOTES = "No iCloud remotes (type = iclouddrive) found in rclone.conf"
    RCLONE_CONF_UPDATED = "\n✓ rclone.conf updated successfully.\n"
    RCLONE_COMMAND_INSTRUCTIONS = "\nRun the following command to authenticate:"
    CONNECTION_TEST_PASSED = "✓ Connection test passed:\n"
    CONNECTION_TEST_FAILED = "✗ Connection test failed - check rclone.conf manually."
