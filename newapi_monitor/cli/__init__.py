"""Command-line interface for the gateway monitor.

Provides commands for fetching a single quota record or usage window, for
watching the balance of every configured site and for managing the site list
in the configuration file.
"""

import click
import json
import os
import sys
import time
from typing import Optional
import logging

from ..browser import PROFILES, get_profile
from ..browser.headers import DEFAULT_PROFILE
from ..errors import ConfigError, GatewayError
from ..http.client import HTTP_VERSIONS, GatewayClient, create_gateway_client
from ..models.auth_context import TimeRange
from ..models.site_config import MonitorConfig, SiteConfig, load_config, save_config
from ..dashboard import collect_snapshot
from ..queries import fetch_quota, fetch_usage_stat


# Defaults the desktop widget fills into a new site form
NEW_SITE_NAME = "New Site"
NEW_SITE_URL = "https://api.husanai.com"
NEW_SITE_USER_ID = "39"


# Configure logging for CLI
def setup_logging(verbose: int = 0) -> None:
    """Setup logging based on verbosity level."""
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.getLogger("newapi_monitor").setLevel(level)


def _client_from_context(ctx: click.Context, timeout: Optional[float]) -> GatewayClient:
    config: MonitorConfig = ctx.obj['config']
    return create_gateway_client(
        timeout=timeout if timeout is not None else config.timeout,
        proxy_url=config.proxy_url,
        impersonate=ctx.obj['profile'].impersonate,
        http_version=ctx.obj['http_version'] or config.http_version,
    )


def _fail(error: Exception) -> None:
    click.echo(str(error), err=True)
    sys.exit(1)


@click.group()
@click.option('--verbose', '-v', count=True, help='Increase verbosity (use -vv for debug)')
@click.option('--config', '-c', type=click.Path(dir_okay=False), help='Configuration file path')
@click.option('--profile', '-p', type=click.Choice(sorted(PROFILES)),
              default=DEFAULT_PROFILE.name, show_default=True,
              help='Browser header profile to send')
@click.option('--http-version', type=click.Choice(list(HTTP_VERSIONS)), default=None,
              help='Force an HTTP version (default: config or impersonation target)')
@click.pass_context
def cli(ctx: click.Context, verbose: int, config: Optional[str], profile: str,
        http_version: Optional[str]) -> None:
    """newapi-monitor - balance and usage watcher for new-api gateways.

    Queries a gateway's console API with a browser session cookie and
    prints the raw replies or a per-site summary.
    """
    setup_logging(verbose)

    # Ensure context object exists
    ctx.ensure_object(dict)

    ctx.obj['verbose'] = verbose
    ctx.obj['config_file'] = config
    ctx.obj['profile'] = get_profile(profile)
    ctx.obj['http_version'] = http_version

    # A missing file starts an empty configuration for `sites add`
    if config and os.path.exists(config):
        try:
            ctx.obj['config'] = load_config(config)
        except (ConfigError, OSError) as e:
            click.echo(f"Error loading config file: {e}", err=True)
            sys.exit(1)
    else:
        ctx.obj['config'] = MonitorConfig()


def session_options(func):
    """Options shared by the single-query commands."""
    func = click.option('--timeout', '-t', type=float, default=None,
                        help='Request timeout in seconds (default: config or 30)')(func)
    func = click.option('--user-id', '-i', required=True, envvar='NEWAPI_USER_ID',
                        help='Console user id (new-api-user header)')(func)
    func = click.option('--cookie', '-k', required=True, envvar='NEWAPI_COOKIE',
                        help='Console session cookie')(func)
    func = click.option('--url', '-u', required=True, help='Gateway base URL')(func)
    return func


@cli.command()
@session_options
@click.pass_context
def quota(ctx: click.Context, url: str, cookie: str, user_id: str,
          timeout: Optional[float]) -> None:
    """Fetch the account record and print the raw reply."""
    client = _client_from_context(ctx, timeout)
    try:
        body = fetch_quota(url, cookie, user_id, client=client, profile=ctx.obj['profile'])
    except GatewayError as e:
        _fail(e)
    click.echo(body)


@cli.command('usage-stat')
@session_options
@click.option('--start', '-s', type=int, default=None,
              help='Window start as Unix seconds (default: local midnight)')
@click.option('--end', '-e', type=int, default=None,
              help='Window end as Unix seconds (default: now)')
@click.pass_context
def usage_stat(ctx: click.Context, url: str, cookie: str, user_id: str,
               timeout: Optional[float], start: Optional[int], end: Optional[int]) -> None:
    """Fetch usage totals for a time window and print the raw reply."""
    today = TimeRange.today()
    start_timestamp = start if start is not None else today.start_timestamp
    end_timestamp = end if end is not None else today.end_timestamp

    client = _client_from_context(ctx, timeout)
    try:
        body = fetch_usage_stat(url, cookie, user_id, start_timestamp, end_timestamp,
                                client=client, profile=ctx.obj['profile'])
    except GatewayError as e:
        _fail(e)
    click.echo(body)


@cli.group(invoke_without_command=True)
@click.option('--watch', '-w', is_flag=True, help='Refresh until interrupted')
@click.option('--interval', '-n', type=float, default=None,
              help='Refresh interval in seconds (default: config refresh_interval)')
@click.option('--json-output', is_flag=True, help='Print snapshots as JSON lines')
@click.pass_context
def sites(ctx: click.Context, watch: bool, interval: Optional[float],
          json_output: bool) -> None:
    """Show balance and today's spend for every configured site."""
    if ctx.invoked_subcommand is not None:
        return

    config: MonitorConfig = ctx.obj['config']
    if not config.sites:
        click.echo("No sites configured; pass --config with a sites list", err=True)
        sys.exit(1)

    refresh = interval if interval is not None else config.refresh_interval
    client = _client_from_context(ctx, None)
    profile = ctx.obj['profile']

    try:
        while True:
            for site in config.sites:
                snapshot = collect_snapshot(site, client, profile=profile)
                if json_output:
                    click.echo(json.dumps(snapshot.to_dict()))
                else:
                    click.echo(snapshot.format_line())

            if not watch:
                break
            time.sleep(refresh)
    except KeyboardInterrupt:
        click.echo("Stopped", err=True)


def _save_sites(ctx: click.Context, config: MonitorConfig) -> None:
    path = ctx.obj['config_file']
    try:
        save_config(config, path)
    except OSError as e:
        _fail(ConfigError(f"Error saving config file: {e}"))


@sites.command('add')
@click.option('--name', default=NEW_SITE_NAME, show_default=True, help='Display name')
@click.option('--url', '-u', default=NEW_SITE_URL, show_default=True, help='Gateway base URL')
@click.option('--cookie', '-k', required=True, envvar='NEWAPI_COOKIE',
              help='Console session cookie')
@click.option('--user-id', '-i', default=NEW_SITE_USER_ID, show_default=True,
              envvar='NEWAPI_USER_ID', help='Console user id')
@click.pass_context
def sites_add(ctx: click.Context, name: str, url: str, cookie: str, user_id: str) -> None:
    """Add a site to the configuration file."""
    _require_config_file(ctx)
    config: MonitorConfig = ctx.obj['config']

    site = config.add_site(SiteConfig(name=name, url=url, cookie=cookie, user_id=user_id))
    _save_sites(ctx, config)
    click.echo(f"Added {site.name} ({site.id})")


@sites.command('edit')
@click.argument('site_key')
@click.option('--name', default=None, help='New display name')
@click.option('--url', '-u', default=None, help='New gateway base URL')
@click.option('--cookie', '-k', default=None, help='New console session cookie')
@click.option('--user-id', '-i', default=None, help='New console user id')
@click.pass_context
def sites_edit(ctx: click.Context, site_key: str, name: Optional[str], url: Optional[str],
               cookie: Optional[str], user_id: Optional[str]) -> None:
    """Change fields of the site with id or name SITE_KEY."""
    _require_config_file(ctx)
    config: MonitorConfig = ctx.obj['config']

    try:
        site = config.update_site(site_key, name=name, url=url, cookie=cookie, user_id=user_id)
    except ConfigError as e:
        _fail(e)
    _save_sites(ctx, config)
    click.echo(f"Updated {site.name} ({site.id})")


@sites.command('remove')
@click.argument('site_key')
@click.confirmation_option(prompt='Delete this site?')
@click.pass_context
def sites_remove(ctx: click.Context, site_key: str) -> None:
    """Delete the site with id or name SITE_KEY."""
    _require_config_file(ctx)
    config: MonitorConfig = ctx.obj['config']

    try:
        site = config.remove_site(site_key)
    except ConfigError as e:
        _fail(e)
    _save_sites(ctx, config)
    click.echo(f"Removed {site.name}")


def _require_config_file(ctx: click.Context) -> None:
    if not ctx.obj['config_file']:
        click.echo("Pass --config to choose the file to update", err=True)
        sys.exit(1)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
