import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

loaded = load_dotenv()
if not loaded and Path(".env").exists():
	raise RuntimeError(".env file present but failed to load")

DATABASE_URL = os.getenv("DATABASE_URL")
USER_AGENT = os.getenv("USER_AGENT", "Mozilla/5.0 (compatible; KBCrawlBot/1.0)")


def get_str_env(name: str, default: str) -> str:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	return raw


def get_optional_str_env(name: str) -> Optional[str]:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return None
	return raw


def get_int_env(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return int(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return default


def get_float_env(name: str, default: float) -> float:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return float(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return default


def mode_timeouts() -> dict:
	"""Overall crawl deadline in seconds per crawl mode."""
	return {
		"single": get_float_env("KBCRAWL_TIMEOUT_SINGLE_SECONDS", 30.0),
		"limited": get_float_env("KBCRAWL_TIMEOUT_LIMITED_SECONDS", 300.0),
		"deep": get_float_env("KBCRAWL_TIMEOUT_DEEP_SECONDS", 600.0),
	}
