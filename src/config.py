import os
from pathlib import Path

from dotenv import load_dotenv

_ENV_LOADED = False


def _load_env() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    env_path = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=env_path)
    _ENV_LOADED = True


def get_env(
    name: str, default: str | None = None, required: bool = False
) -> str | None:
    _load_env()
    value = os.environ.get(name, default)
    if required and (value is None or value == ""):
        raise SystemExit(f"{name} env var is required")
    return value


def get_rpc_urls() -> list[str]:
    """ETHEREUM_RPC_URL, comma separated when fallbacks are configured."""
    value = get_env("ETHEREUM_RPC_URL", required=True) or ""
    return [url.strip() for url in value.split(",") if url.strip()]
