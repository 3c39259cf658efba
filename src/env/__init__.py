from env.env import (
    Environment,
    LoggingEnvironment,
    get_env,
    reset_env_caches,
    get_logging_env,
    ConfigError,
    _load_dotenv,
)

from env.paths import (
    AUTH_DIR,
    CONFIG_DIR,
    DATA_DIR,
    LOGS_DIR,
    OUT_DIR,
    PROJECT_ROOT,
)

__all__ = [
    "Environment",
    "LoggingEnvironment",
    "get_env",
    "reset_env_caches",
    "get_logging_env",
    "ConfigError",
    "AUTH_DIR",
    "CONFIG_DIR",
    "DATA_DIR",
    "LOGS_DIR",
    "OUT_DIR",
    "PROJECT_ROOT",
    "_load_dotenv",
]
