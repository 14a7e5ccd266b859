"""
配置管理器 - 读写和合并配置
Config manager - reads, writes, and merges configuration.

使用 JSON 文件存储，支持默认值合并和嵌套键访问。
Uses JSON file storage with default value merging and nested key access.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from AetherForge.config.defaults import build_default_config

logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigManager:
    """
    配置管理器 - 子系统的配置中心
    Config manager - the configuration center of the subsystem.

    支持：
    - 嵌套键访问（如 "paths.plugins_dir"）
    - 默认值自动合并
    - 持久化到 JSON 文件
    """

    def __init__(
        self,
        defaults: dict[str, Any] | None = None,
        config_path: str | None = None,
    ) -> None:
        self._defaults = defaults if defaults is not None else build_default_config()
        self._config: dict[str, Any] = {}
        self._config_path = config_path

    @property
    def config_path(self) -> str:
        if self._config_path is None:
            from AetherForge.kernel.paths import get_config_file

            return str(get_config_file())
        return self._config_path

    def load(self) -> None:
        """
        加载配置文件
        Load configuration file.
        """
        path = self.config_path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        if os.path.exists(path):
            try:
                with open(path, encoding="utf-8") as f:
                    self._config = json.load(f)
                logger.info("配置已从 %s 加载", path)
            except (json.JSONDecodeError, OSError):
                logger.warning("加载配置失败，使用默认值")
                self._config = {}
        else:
            self._config = {}
            logger.info("未找到配置文件，将创建默认配置")

        # 合并默认值
        self._merge_defaults(self._config, self._defaults)
        self.save()

    def save(self) -> None:
        """
        保存配置到文件
        Save configuration to file.
        """
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, ensure_ascii=False, indent=2)
        except OSError:
            logger.exception("保存配置失败")

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值（支持嵌套键，如 "paths.plugins_dir"）
        Get config value (supports nested keys like "paths.plugins_dir").

        未加载或缺失的键回退到默认配置。
        Keys missing from the loaded file fall back to the defaults.
        """
        value = self._lookup(self._config, key)
        if value is _MISSING:
            value = self._lookup(self._defaults, key)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any) -> None:
        """
        设置配置值（支持嵌套键）
        Set config value (supports nested keys).
        """
        keys = key.split(".")
        current = self._config
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def as_dict(self) -> dict[str, Any]:
        """获取完整配置字典 / Get the full config dictionary."""
        merged = json.loads(json.dumps(self._config))
        self._merge_defaults(merged, self._defaults)
        return merged

    @staticmethod
    def _lookup(source: dict[str, Any], key: str) -> Any:
        current: Any = source
        for k in key.split("."):
            if not isinstance(current, dict) or k not in current:
                return _MISSING
            current = current[k]
        return current

    def _merge_defaults(self, config: dict[str, Any], defaults: dict[str, Any]) -> None:
        """
        递归合并默认值到配置中（不覆盖已有值）
        Recursively merge defaults into config (does not overwrite existing).
        """
        for key, default_value in defaults.items():
            if key not in config:
                config[key] = json.loads(json.dumps(default_value))
            elif isinstance(default_value, dict) and isinstance(config[key], dict):
                self._merge_defaults(config[key], default_value)


# 全局配置管理器
_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Get the global config manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def set_config_manager(manager: ConfigManager | None) -> None:
    """替换全局配置管理器（None 表示重置） / Replace the global config manager (None resets)."""
    global _config_manager
    _config_manager = manager
