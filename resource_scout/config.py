# === FILE: resource_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации анализатора ResourceScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from resource_scout.crawler.relays import RELAYS_BY_NAME


class AnalyzerConfig(BaseModel):
    """Конфигурация для одного запуска анализа страницы."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    concurrency: int = Field(3, ge=1, description="Максимум одновременных загрузок ресурсов.")
    document_timeout: float = Field(15.0, gt=0, description="Таймаут загрузки корневой страницы (секунд).")
    probe_timeout: float = Field(5.0, gt=0, description="Таймаут прямого HEAD-запроса (секунд).")
    relay_timeout: float = Field(10.0, gt=0, description="Таймаут запроса через relay (секунд).")
    min_request_delay: float = Field(0.1, ge=0, description="Минимальная пауза между запросами к relay.")
    document_request_delay: float = Field(0.2, ge=0, description="Пауза перед загрузкой корневой страницы.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток через relay.")
    backoff_base: float = Field(1.0, ge=0, description="Начальная пауза при HTTP 429 (секунд).")
    backoff_cap: float = Field(5.0, ge=0, description="Максимальная пауза при HTTP 429 (секунд).")
    retry_delay: float = Field(0.5, ge=0, description="Шаг паузы для прочих ошибок (секунд).")
    user_agent: str = Field("ResourceScout/1.0", min_length=1, description="Заголовок User-Agent.")
    direct_probe: bool = Field(True, description="Пробовать прямой HEAD-запрос перед relay.")
    relays: Optional[List[str]] = Field(
        None, description="Порядок relay по имени; None - весь каталог."
    )
    allow_manual_relays: bool = Field(
        False, description="Разрешить relay, требующие ручной авторизации."
    )

    @field_validator("relays")
    def _check_relay_names(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        unknown = [name for name in v if name not in RELAYS_BY_NAME]
        if unknown:
            raise ValueError(f"unknown relay(s): {', '.join(unknown)}")
        if not v:
            raise ValueError("at least one relay is required")
        return v

    @model_validator(mode="after")
    def _check_backoff(self) -> AnalyzerConfig:
        if self.backoff_cap < self.backoff_base:
            raise ValueError("backoff_cap must not be smaller than backoff_base")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> AnalyzerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект AnalyzerConfig.
    Без пути берётся configs/default.yaml, а если его нет - значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return AnalyzerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return AnalyzerConfig(**data)


__all__ = ["AnalyzerConfig", "load_config", "ValidationError"]
