"""設定ファイル読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .config import SwitcherLabsConfig, build_config
from .exceptions import ConfigurationError


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """base に override を再帰的に重ねた新しい辞書を返す。リストは置換する。"""
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_section(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file: {path}", cause=e) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML: {path}", cause=e) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {path}")
    # switcherlabs: セクションがあればそれを、なければファイル全体を設定とみなす
    section = data.get("switcherlabs", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"switcherlabs section must be a mapping: {path}")
    return section


def load_config(base_path: Path, env_path: Path | None = None) -> SwitcherLabsConfig:
    """YAML 設定ファイルを読み込んで SwitcherLabsConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_section(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_section(env_path))
    return build_config(**data)
