"""Typer CLI entrypoint with structured error handling."""

from __future__ import annotations

import sys

import typer

from vol_dashboard.cli.commands.market import dvol, volatility
from vol_dashboard.cli.commands.normalize import normalize
from vol_dashboard.cli.commands.position import position
from vol_dashboard.exceptions import (
    ConfigValidationError,
    DataSourceError,
    InsufficientDataError,
)
from vol_dashboard.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Volatility dashboard CLI")


app.command()(normalize)
app.command()(volatility)
app.command()(dvol)
app.command()(position)


log = get_logger(__name__, component="cli")


def main() -> None:
    configure_logging(component="cli")
    try:
        app()
    except ConfigValidationError as exc:
        log.error(str(exc))
        sys.exit(1)
    except InsufficientDataError as exc:
        log.error(f"Data validation failed: {exc}")
        sys.exit(3)
    except DataSourceError as exc:
        log.error(f"Data source failed: {exc}")
        sys.exit(2)
    except KeyboardInterrupt:
        log.info("Shutdown requested")
        sys.exit(130)
    except Exception:
        log.exception("Unhandled exception")
        sys.exit(255)


if __name__ == "__main__":
    sys.exit(main())
