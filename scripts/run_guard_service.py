"""
Guard Service Launcher

Starts the SecureGuard control API.

Usage:
    python scripts/run_guard_service.py --host 127.0.0.1 --port 5000

Environment Variables:
    SECUREGUARD_API_PORT: API port (default: 5000)
    SECUREGUARD_BIND_HOST: Bind address (default: 127.0.0.1)
    SECUREGUARD_LOG_LEVEL: Log level name (default: INFO)
    SECUREGUARD_LOG_FILE: Optional log file path
    SECUREGUARD_APPLIER: noop | script (default: noop)
    SECUREGUARD_APPLY_SCRIPT: Script run by the 'script' applier
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from guard import config
from guard.service import create_app
from guard.startup_profile import StartupProfile, validate_guard_profile
from guard.system_changes import build_applier
from shared.logging_config import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Run SecureGuard control service")
    parser.add_argument("--host", default=config.BIND_HOST)
    parser.add_argument("--port", type=int, default=config.API_PORT)
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    parser.add_argument("--log-file", default=config.LOG_FILE)
    parser.add_argument("--applier", choices=["noop", "script"], default=config.APPLIER)
    parser.add_argument("--apply-script", default=config.APPLY_SCRIPT)
    args = parser.parse_args()

    logger = setup_logging("guard", level=args.log_level, log_file=args.log_file)
    validate_guard_profile(
        StartupProfile(role="GUARD", host=args.host, port=args.port),
        applier=args.applier,
        apply_script=args.apply_script,
    )

    logger.info("=" * 60)
    logger.info("SecureGuard Control Service")
    logger.info(f"API Address: {args.host}:{args.port}{config.API_PREFIX}")
    logger.info(f"System applier: {args.applier}")
    logger.info("=" * 60)

    app = create_app(applier=build_applier(args.applier, args.apply_script))
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
