"""
Console entry point.

The output guard is installed before anything else is imported so that
nothing (third-party import-time output included) can bypass redaction.
"""
from secrets_sync.bootstrap import install

install()

import sys  # noqa: E402

from secrets_sync.cli import app  # noqa: E402
from secrets_sync.cli_output import format_error, print_critical_error  # noqa: E402
from secrets_sync.exceptions import SecretsSyncError  # noqa: E402
from secrets_sync.security import clear_cache  # noqa: E402


def main() -> None:
    try:
        app()
    except SecretsSyncError as e:
        print(format_error(e), file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print_critical_error("Unhandled error", e)
        sys.exit(1)
    finally:
        clear_cache()


if __name__ == "__main__":
    main()
