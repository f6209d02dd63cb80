# === FILE: resource_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска анализатора ResourceScout через командную строку.

Команды:
  analyze URL   Проанализировать страницу и вывести/сохранить JSON-отчёт
  config        Показать текущую конфигурацию
  profiles      Показать каталог сетевых профилей

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда analyze опции:
  --json PATH         Сохранить JSON-отчёт в файл
  --pretty            Форматировать JSON с отступом 2 (stdout и файл)
  --scan-timeout SEC  Таймаут всего анализа (секунд)
  --concurrency N     Одновременных загрузок (override concurrency)
  --quiet             Не печатать прогресс

Пример:
  resource-scout analyze example.com --json report.json --concurrency 5
"""
import asyncio
import sys
from pathlib import Path

import click

from resource_scout import __version__
from resource_scout.aggregator import aggregate_results
from resource_scout.analysis.load_time import NETWORK_PROFILES
from resource_scout.config import load_config
from resource_scout.engine import start_analysis
from resource_scout.exceptions import FetchFailed, InvalidURL
from resource_scout.logger import init_logging
from resource_scout.report.json_report import render_json
from resource_scout.utils import format_bytes

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _echo_progress(message: str, current: int, total: int) -> None:
    click.echo(f'[{current}/{total}] {message}', err=True)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ResourceScout, version %(version)s')
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
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд ResourceScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('analyze', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Форматировать JSON с отступом 2 (stdout и файл --json)'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Таймаут всего анализа (секунд)'
)
@click.option(
    '--concurrency', 'concurrency',
    type=click.IntRange(min=1),
    default=None,
    help='Одновременных загрузок ресурсов (override concurrency)'
)
@click.option('--quiet', '-q', is_flag=True, help='Не печатать прогресс')
@click.pass_context
def analyze(ctx, url, json_output, pretty, scan_timeout, concurrency, quiet):
    """Проанализировать страницу URL и сгенерировать отчёт."""
    cfg = ctx.obj['config']
    if concurrency is not None:
        cfg = cfg.model_copy(update={'concurrency': concurrency})
    progress = None if quiet else _echo_progress

    try:
        if scan_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_analysis(url, cfg, progress), timeout=scan_timeout)
            )
        else:
            result = asyncio.run(start_analysis(url, cfg, progress))
    except asyncio.TimeoutError:
        print_error(f'Анализ не завершён за {scan_timeout} секунд')
    except InvalidURL as e:
        print_error(f'Некорректный URL: {e}')
    except FetchFailed as e:
        print_error(f'Не удалось загрузить страницу: {e}')

    report = aggregate_results(result)
    if not quiet:
        click.echo(
            f'Score: {report.score.total_score}/100, '
            f'{result.total_files} files, {format_bytes(result.total_size)}',
            err=True,
        )

    if not json_output:
        click.echo(report.json(pretty=pretty))
        return

    try:
        saved_json = render_json(report, json_output, pretty=pretty)
    except OSError as e:
        print_error(f'Ошибка при сохранении JSON: {e}')
    click.echo(f'JSON report: {saved_json}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


@cli.command('profiles', context_settings=CONTEXT_SETTINGS)
def show_profiles():
    """Показать сетевые профили, используемые для оценки времени загрузки."""
    for profile in NETWORK_PROFILES:
        click.echo(
            f'{profile.key:<6} {profile.name:<12} {profile.download_mbps:>7g} Mbps '
            f'{profile.latency_ms:>5g} ms  x{profile.max_connections}'
        )


if __name__ == "__main__":
    cli()
