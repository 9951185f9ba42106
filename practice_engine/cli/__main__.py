"""Allow ``python -m practice_engine.cli``."""

from practice_engine.cli.main import run

run()
