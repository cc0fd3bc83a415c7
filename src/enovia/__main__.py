"""ENOVIA connection check. Use --help for usage."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import aiohttp
from dotenv import load_dotenv

from config import EnoviaConfig, load_config
from core.errors import PlatformError, classify_exception
from core.logging import set_log_context, setup_logging
from enovia.service import EnoviaBaseService
from passport import BatchServicePassport, CASCookieBasedPassport, UserPassport

# __main__.py is at src/enovia/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

EXIT_OK = 0
EXIT_LOGIN_FAILED = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m enovia",
        description="Log in to the 3DEXPERIENCE platform and fetch a CSRF token.",
    )
    parser.add_argument("command", choices=["check"], help="Operation to run")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level",
    )
    parser.add_argument("--log-dir", type=Path, default=None, help="Also write JSON logs here")
    return parser.parse_args(argv)


def build_passport(config: EnoviaConfig) -> CASCookieBasedPassport:
    if config.auth_mode == "batch":
        return BatchServicePassport(config.passport_url, timeout_seconds=config.timeout_seconds)
    return UserPassport(config.passport_url, timeout_seconds=config.timeout_seconds)


async def login(passport: CASCookieBasedPassport, config: EnoviaConfig) -> bool:
    if isinstance(passport, BatchServicePassport):
        return await passport.login(
            config.service_name, config.service_secret, config.on_behalf_of
        )
    return await passport.login(config.username, config.password, config.remember_me)


async def run_check(config: EnoviaConfig) -> int:
    async with build_passport(config) as passport:
        if not await login(passport, config):
            logger.error("Login failed", extra={"passport_url": config.passport_url})
            return EXIT_LOGIN_FAILED

        identity = passport.get_identity()
        logger.info(f"Authenticated as {identity.user_id} ({identity.authentication_type})")

        async with EnoviaBaseService(
            config.service_url,
            passport,
            tenant=config.tenant,
            security_context=config.security_context,
            csrf_validity_minutes=config.csrf_validity_minutes,
            timeout_seconds=config.timeout_seconds,
        ) as service:
            await service.get_csrf_token()
            entry = service.csrf_cache.entry
            logger.info(
                "CSRF token acquired",
                extra={
                    "service_url": service.service_url,
                    "token_age_seconds": entry.age.total_seconds(),
                },
            )
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    args = parse_args(argv)
    setup_logging(
        name="enovia",
        log_dir=args.log_dir,
        console_level=getattr(logging, args.log_level),
    )
    set_log_context(operation=args.command)

    try:
        config = load_config(args.config)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    if config.tenant:
        set_log_context(tenant=config.tenant)

    try:
        return asyncio.run(run_check(config))
    except (PlatformError, aiohttp.ClientError, TimeoutError) as e:
        logger.error(
            f"Check failed: {e}",
            extra={
                "error_category": classify_exception(e).value,
                "error_type": type(e).__name__,
            },
        )
        return EXIT_LOGIN_FAILED


if __name__ == "__main__":
    sys.exit(main())
