import functools
from pathlib import Path
from typing import Type, Any, Tuple, Dict

import pytz
from lupa.lua51 import LuaRuntime
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
from pydantic import field_validator
from pydantic.fields import FieldInfo
from loguru import logger

SETTINGS_LUA_FILE = Path("settings.lua")


# region - template

class LuaConfigSettingsSource(PydanticBaseSettingsSource):
    """从 lua 文件的全局表 config 中读取配置，文件不存在时视为空配置"""

    def __init__(self, settings_cls: Type[BaseSettings], lua_file: Path, lua_file_encoding: str = "utf-8"):
        super().__init__(settings_cls)
        self.settings_cls = settings_cls
        self.lua_file = lua_file
        self.lua_file_encoding = lua_file_encoding

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        config_dict = self._load_lua_config()
        if field_name in config_dict:
            return config_dict[field_name], field_name, True
        return None, field_name, False

    def _load_lua_config(self) -> Dict:
        if not self.lua_file.is_file():
            logger.debug("{} doesn't exist, skip", self.lua_file)
            return {}
        lua = LuaRuntime()
        with open(self.lua_file, "r", encoding=self.lua_file_encoding) as f:
            lua_code = f.read()
        lua.execute(lua_code)
        config = lua.globals()["config"]
        if config is None:
            return {}
        # [note] 只把 lua 文件当 json 用，值只允许字符串、数字、布尔
        return dict(config)

    def __call__(self) -> Dict[str, Any]:
        return self._load_lua_config()


class DynamicSettings(BaseSettings):
    """动态配置即不需要修改代码的配置

    Details:
        1. 优先级：初始化参数 > 环境变量（NOTES_ 前缀）> .env > settings.lua > 默认值
        2. 字段上限（标题 100、正文 200）是固定常量，见 forms.py，不允许配置

    """

    @classmethod
    def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            LuaConfigSettingsSource(settings_cls, lua_file=SETTINGS_LUA_FILE, lua_file_encoding="utf-8"),
            file_secret_settings,
        )

    @field_validator("api_base_url", mode="before")
    @classmethod
    def validate_api_base_url(cls, value: str):
        value = str(value).strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"api_base_url 必须以 http:// 或 https:// 开头: {value}")
        return value.rstrip("/")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str):
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"未知的时区: {value}") from e
        return value

    model_config = SettingsConfigDict(
        env_prefix="NOTES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    title: str = "Notes"
    host: str = "127.0.0.1"
    port: int = 8888
    version: str = "0.1.0"
    api_base_url: str = "http://127.0.0.1:4000/api"
    request_timeout: float = 10.0
    timezone: str = "UTC"


@functools.lru_cache()
def get_dynamic_settings() -> DynamicSettings:
    return DynamicSettings()


dynamic_settings = get_dynamic_settings()

# endregion
