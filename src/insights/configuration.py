# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Literal, Optional, TypedDict

from yaml import load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]
import platformdirs

APP_NAME = "insights"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

# Set dynamically by load_data_path_configuration()
DATA_PATH: Path = platformdirs.user_data_path(APP_NAME)

RemoteKind = Literal["file", "http"]


class Configuration(TypedDict):
    remote: RemoteKind
    api_base_url: str
    api_timeout_seconds: float
    auth_cookie: Optional[str]
    data_path: Optional[str]
    history_page_size: int
    message_timeout_ms: int
    show_header: bool


def get_default_configuration() -> Configuration:
    return {
        "remote": "file",
        "api_base_url": "http://localhost:5000",
        "api_timeout_seconds": 30.0,
        "auth_cookie": None,
        "data_path": None,
        "history_page_size": 10,
        "message_timeout_ms": 5000,
        "show_header": True,
    }


def load_data_path_configuration() -> None:
    """
    Load the configuration and set DATA_PATH dynamically.

    This must be called after the config file exists and before the file
    backed remote store is created.
    """
    global DATA_PATH

    if not APP_CONFIG_PATH.is_file():
        # Config doesn't exist yet, use defaults
        return

    config: Optional[Configuration] = load(APP_CONFIG_PATH.read_text(), Loader=Loader)
    if config is None:
        return
    data_path_setting = config.get("data_path")

    if data_path_setting is not None:
        DATA_PATH = Path(data_path_setting)
