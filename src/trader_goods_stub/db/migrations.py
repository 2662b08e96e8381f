from pathlib import Path

from alembic.config import Config

from alembic import command

_REPO_ROOT = Path(__file__).resolve().parents[3]


def get_alembic_config(db_url: str, root: Path = _REPO_ROOT) -> Config:
    cfg = Config(str(root / "alembic.ini"))
    cfg.set_main_option("script_location", str(root / "alembic"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def run_migrations(db_url: str) -> None:
    command.upgrade(get_alembic_config(db_url), "head")


def rollback_migrations(db_url: str) -> None:
    command.downgrade(get_alembic_config(db_url), "base")
