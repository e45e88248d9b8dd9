import json
import os
from pathlib import Path
from typing import Any, Dict

from .utils import logger


DEFAULT_CONFIG_PATH = Path(os.getenv("CLINOTE_CONFIG", "config/clinote_config.json"))

# config key -> (environment variable, formatter)
ENV_MAPPING = {
    "dataset_path": ("CLINOTE_DATASET_PATH", str),
    "dataset_sample_size": ("CLINOTE_DATASET_SAMPLE_SIZE", str),
    "random_seed": ("CLINOTE_RANDOM_SEED", str),
    "cors_origins": ("CLINOTE_CORS_ORIGINS", lambda v: ",".join(v) if isinstance(v, list) else str(v)),
    "debug": ("CLINOTE_DEBUG", lambda v: "1" if v else "0"),
    "log_file": ("CLINOTE_LOG_FILE", str),
}


def load_runtime_config(path: str | os.PathLike | None = None) -> Dict[str, Any]:
    """Load JSON config if it exists, otherwise return empty dict."""
    cfg_path = Path(path or DEFAULT_CONFIG_PATH)
    if not cfg_path.exists():
        return {}
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.log(f"[WARN] Ignoring unreadable config {cfg_path}: {exc}")
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def apply_runtime_config(path: str | os.PathLike | None = None) -> Dict[str, str]:
    """
    Apply runtime settings by setting environment variables.
    Existing env vars take precedence. Returns the variables that were set.
    """

    config = load_runtime_config(path)
    runtime = config.get("runtime", config)

    applied = {}
    for key, (env_var, formatter) in ENV_MAPPING.items():
        if env_var in os.environ:
            continue
        if key in runtime and runtime[key] is not None:
            os.environ[env_var] = applied[env_var] = formatter(runtime[key])
    return applied
