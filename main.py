#!/usr/bin/env python3
"""rclone iCloud authenticator.

Logs in to iCloud in a browser, harvests the trust token and session cookies,
and stores them in rclone.conf.
"""

import sys

from icloud_auth.cli import main


if __name__ == "__main__":
    sys.exit(main())
