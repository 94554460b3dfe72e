"""Command-line entry point for launching the AskEBL Streamlit dashboard."""

from __future__ import annotations

import argparse
import os
import sqlite3
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from askebl.config import config
from askebl.knowledge import load_knowledge_base
from askebl.store import BankingStore

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from logging import Logger

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_APP = PROJECT_ROOT / "app.py"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Launch the AskEBL banking assistant dashboard.",
    )
    parser.add_argument(
        "--app",
        type=Path,
        default=DEFAULT_APP,
        help="Path to the Streamlit script (default: app.py).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8501,
        help="Port for the Streamlit server (default: 8501).",
    )
    parser.add_argument(
        "--address",
        default="localhost",
        help="Bind address for the Streamlit server (default: localhost).",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database path (default: DATABASE_PATH or data/askebl.db).",
    )
    parser.add_argument(
        "--knowledge-base",
        type=Path,
        default=None,
        help="JSON file with FAQs and popular questions to answer from.",
    )
    parser.add_argument(
        "--seed-only",
        action="store_true",
        help="Create and seed the demo database, then exit.",
    )
    parser.add_argument(
        "--show",
        dest="headless",
        action="store_false",
        help="Open Streamlit in a browser window instead of headless mode.",
    )
    parser.set_defaults(headless=True)
    return parser.parse_args(argv)


def build_streamlit_command(
    script_path: Path,
    *,
    port: int,
    headless: bool,
    address: str,
) -> list[str]:
    """Construct the streamlit CLI invocation."""  # noqa: DOC201
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(script_path),
        "--server.port",
        str(port),
        "--server.address",
        address,
        "--server.headless",
        "true" if headless else "false",
    ]


def build_environment(
    db_path: Path, knowledge_base: Path | None
) -> dict[str, str]:
    """Environment for the Streamlit process with storage overrides applied."""  # noqa: DOC201
    env = dict(os.environ)
    env["DATABASE_PATH"] = str(db_path)
    if knowledge_base is not None:
        env["KNOWLEDGE_BASE_PATH"] = str(knowledge_base)
    return env


def prepare_store(db_path: Path, logger: Logger) -> bool:
    """Create the database and seed demo data if it is empty."""  # noqa: DOC201
    try:
        store = BankingStore(db_path)
        if store.seed_demo_data(config.DEMO_PASSWORD):
            logger.info("Seeded demo data into %s", db_path)
    except (sqlite3.Error, OSError):
        logger.exception("Unable to prepare database %s", db_path)
        return False
    return True


def run_streamlit(
    command: Sequence[str], env: Mapping[str, str], logger: Logger
) -> int:
    """Execute the configured streamlit command and return its exit code."""  # noqa: DOC201
    try:
        result = subprocess.run(
            command,
            check=False,
            cwd=PROJECT_ROOT,
            env=dict(env),
        )
    except KeyboardInterrupt:
        logger.info("AskEBL stopped by user")
        return 0
    except OSError:
        logger.exception("Unable to launch Streamlit")
        return 1
    return result.returncode


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration, prepare the store and launch the dashboard."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    db_path = (args.db or config.DATABASE_PATH).resolve()
    knowledge_base = args.knowledge_base or config.KNOWLEDGE_BASE_PATH
    if knowledge_base is not None:
        knowledge_base = knowledge_base.resolve()
        try:
            load_knowledge_base(knowledge_base)
        except (OSError, ValueError):
            logger.exception("Knowledge base invalid: %s", knowledge_base)
            return 1

    if not prepare_store(db_path, logger):
        return 1
    if args.seed_only:
        return 0

    script_path = (
        args.app if args.app.is_absolute() else (PROJECT_ROOT / args.app)
    ).resolve()
    if not script_path.exists():
        logger.error("Streamlit script not found: %s", script_path)
        return 1

    logger.info(
        "Starting AskEBL dashboard at http://%s:%s (headless=%s)",
        args.address,
        args.port,
        args.headless,
    )

    command = build_streamlit_command(
        script_path,
        port=args.port,
        headless=args.headless,
        address=args.address,
    )

    return_code = run_streamlit(
        command, build_environment(db_path, knowledge_base), logger
    )
    if return_code != 0:
        logger.error("Streamlit exited with status %s", return_code)
    return return_code


if __name__ == "__main__":
    sys.exit(main())
