# === FILE: site_graph/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера SiteGraph.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Mapping, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

DEFAULT_MAX_PAGES = 20
DEFAULT_MAX_DEPTH = 3
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_LINKS_PER_PAGE = 10
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SiteGraphBot/1.0)"
DEFAULT_LINK_CHECK_LIMIT = 10


class CrawlConfig(BaseModel):
    """Конфигурация для одного запуска обхода сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    start_url: HttpUrl = Field(..., description="Стартовый URL обхода.")
    max_pages: int = Field(DEFAULT_MAX_PAGES, ge=1, le=100, description="Жесткий лимит по числу страниц.")
    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=0, le=5, description="Максимальная глубина обхода ссылок.")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Таймаут на один запрос (секунд).")
    max_links_per_page: int = Field(
        DEFAULT_MAX_LINKS_PER_PAGE, ge=1, description="Сколько внутренних ссылок страницы попадает в очередь."
    )
    concurrency: int = Field(1, ge=1, le=32, description="Число параллельных загрузчиков.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    rate_limit: float = Field(10.0, gt=0, description="Лимит запросов в секунду.")
    link_check_limit: int = Field(
        DEFAULT_LINK_CHECK_LIMIT,
        ge=0,
        description="Сколько непосещённых внутренних ссылок страницы проверять на битость (0 = не проверять).",
    )


def apply_overrides(data: Mapping[str, Any], **overrides: Any) -> dict[str, Any]:
    """Копия ``data``, в которой непустые ``overrides`` перекрывают значения."""
    merged = dict(data)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


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


def read_config_file(path: Union[str, Path, None]) -> dict[str, Any]:
    """
    Читает YAML или JSON и возвращает «сырые» настройки без проверки.
    При отсутствии файла бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None], **overrides: Any) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    Непустые ``overrides`` (например, из CLI) перекрывают значения файла.
    """
    return CrawlConfig(**apply_overrides(read_config_file(path), **overrides))


__all__ = ["CrawlConfig", "apply_overrides", "load_config", "read_config_file", "ValidationError"]
