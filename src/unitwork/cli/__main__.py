"""Allow ``python -m unitwork.cli``."""

from unitwork.cli.app import app

app()
