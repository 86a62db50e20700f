from .env import EnvError, find_project_dotenv, get_app_env, load_env
from .logging_config import get_logger, resolve_level

__all__ = ["EnvError", "find_project_dotenv", "get_app_env", "get_logger", "load_env", "resolve_level"]
