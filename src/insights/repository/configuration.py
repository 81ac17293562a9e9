# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from insights import configuration


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        self._config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)

        if self._config is None:
            self._config = configuration.get_default_configuration()
            self.is_dirty = True
            return

        # Migration: add settings introduced after the file was written
        for key, value in configuration.get_default_configuration().items():
            if key not in self._config:
                self._config[key] = value  # type: ignore[literal-required]
                self.is_dirty = True

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.write_text(dump(config, Dumper=Dumper))

    def flush(self) -> None:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        remote: Optional[configuration.RemoteKind] = None,
        api_base_url: Optional[str] = None,
        api_timeout_seconds: Optional[float] = None,
        auth_cookie: Optional[str] = None,
        remove_auth_cookie: bool = False,
        data_path: Optional[str] = None,
        remove_data_path: bool = False,
        history_page_size: Optional[int] = None,
        message_timeout_ms: Optional[int] = None,
        show_header: Optional[bool] = None,
    ) -> None:
        self.is_dirty = True

        if remote is not None:
            self.config["remote"] = remote
        if api_base_url is not None:
            self.config["api_base_url"] = api_base_url
        if api_timeout_seconds is not None:
            self.config["api_timeout_seconds"] = api_timeout_seconds
        if auth_cookie is not None:
            self.config["auth_cookie"] = auth_cookie
        if remove_auth_cookie:
            self.config["auth_cookie"] = None
        if data_path is not None:
            self.config["data_path"] = data_path
        if remove_data_path:
            self.config["data_path"] = None
        if history_page_size is not None:
            self.config["history_page_size"] = history_page_size
        if message_timeout_ms is not None:
            self.config["message_timeout_ms"] = message_timeout_ms
        if show_header is not None:
            self.config["show_header"] = show_header


CONFIGURATION_REPO = ConfigurationRepository()
