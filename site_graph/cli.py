# === FILE: site_graph/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска краулера SiteGraph через командную строку.

Команды:
  crawl     Обойти сайт и вывести JSON-отчёт (страницы, сводка, граф ссылок)
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (необязательно)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)

Опции crawl / config:
  --max-pages INT     Лимит страниц (1..100)
  --max-depth INT     Максимальная глубина (0..5)
  --concurrency INT   Число параллельных загрузок
  --timeout SEC       Таймаут одного запроса
  --links-per-page N  Сколько ссылок страницы ставить в очередь
  --check-links N     Сколько непосещённых ссылок страницы проверять на битость

Пример:
  site_graph crawl https://example.com --max-pages 50 --max-depth 2 --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_graph import __version__
from site_graph.config import CrawlConfig, apply_overrides, read_config_file
from site_graph.crawler.models import CrawlProgress
from site_graph.engine import start_crawl
from site_graph.errors import SiteGraphError
from site_graph.logger import configure

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def crawl_options(func):
    """Опции, общие для команд crawl и config."""
    options = [
        click.argument('start_url', required=False),
        click.option('--max-pages', '-p', 'max_pages', type=int, default=None,
                     help='Макс. число страниц (override max_pages)'),
        click.option('--max-depth', '-d', 'max_depth', type=int, default=None,
                     help='Максимальная глубина обхода'),
        click.option('--concurrency', '-n', 'concurrency', type=int, default=None,
                     help='Число параллельных загрузок'),
        click.option('--timeout', '-t', 'timeout', type=float, default=None,
                     help='Таймаут одного запроса (секунд)'),
        click.option('--links-per-page', 'max_links_per_page', type=int, default=None,
                     help='Сколько внутренних ссылок страницы ставить в очередь'),
        click.option('--check-links', 'link_check_limit', type=int, default=None,
                     help='Сколько непосещённых ссылок страницы проверять на битость (0 = выкл.)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(ctx, **overrides) -> CrawlConfig:
    data = apply_overrides(ctx.obj['config_data'], **overrides)
    if 'start_url' not in data:
        print_error('Не указан стартовый URL (аргумент START_URL или start_url в конфиге)')
    try:
        return CrawlConfig(**data)
    except ValidationError as e:
        print_error(f'Ошибка конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteGraph, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file):
    """Группа команд SiteGraph CLI."""
    configure(level=log_level, log_file=str(log_file) if log_file else None)
    data = {}
    if config_path is not None:
        try:
            data = read_config_file(config_path)
        except (OSError, ValueError, TypeError) as e:
            print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config_data'] = data


def _echo_progress(progress: CrawlProgress) -> None:
    click.echo(
        f'[{progress.status.value}] {progress.current}/{progress.total} {progress.current_url}',
        err=True,
    )


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option('--progress', 'show_progress', is_flag=True, help='Печатать ход обхода в stderr')
@click.pass_context
def crawl(ctx, start_url, max_pages, max_depth, concurrency, timeout, max_links_per_page,
          link_check_limit, pretty, show_progress):
    """Обойти сайт и вывести JSON-отчёт."""
    cfg = build_config(
        ctx,
        start_url=start_url,
        max_pages=max_pages,
        max_depth=max_depth,
        concurrency=concurrency,
        timeout=timeout,
        max_links_per_page=max_links_per_page,
        link_check_limit=link_check_limit,
    )
    try:
        report = asyncio.run(
            start_crawl(cfg, progress_callback=_echo_progress if show_progress else None)
        )
    except SiteGraphError as e:
        print_error(f'Ошибка при обходе: {e}')

    click.echo(report.json(pretty=pretty))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.pass_context
def show_config(ctx, start_url, max_pages, max_depth, concurrency, timeout, max_links_per_page,
                link_check_limit):
    """Показать итоговую конфигурацию в JSON."""
    cfg = build_config(
        ctx,
        start_url=start_url,
        max_pages=max_pages,
        max_depth=max_depth,
        concurrency=concurrency,
        timeout=timeout,
        max_links_per_page=max_links_per_page,
        link_check_limit=link_check_limit,
    )
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
