"""
Main CLI interface for probectl
"""

import click
import sys
from . import __version__
from .config import config
from .client import ProbeClient, ProbeClientError
from .formatter import (
    print_success,
    print_error,
    print_info,
    print_warning,
    print_json,
    print_probe_outcome,
)


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx):
    """
    probectl - Command line tool for siteprobe

    Call the liveness/readiness probes and inspect the site configuration.
    """
    ctx.ensure_object(dict)


# ============================================================================
# Config Commands
# ============================================================================

@cli.group('config')
def config_cmd():
    """Configure probectl"""
    pass


@config_cmd.command('set')
@click.option('--url', help='siteprobe base URL')
@click.option('--token', help='Probe token (HEALTHZ_TOKEN)')
def config_set(url, token):
    """Set configuration"""
    if url:
        config.set('url', url)
        print_success(f"URL set to: {url}")

    if token:
        config.set('token', token)
        print_success("Token updated")

    if not url and not token:
        print_error("Please provide --url and/or --token")
        sys.exit(1)


@config_cmd.command('show')
def config_show():
    """Show current configuration"""
    cfg = dict(config.load())

    if not cfg:
        print_warning("No configuration found. Run 'probectl config set' to configure.")
        return

    # Mask token
    if cfg.get('token'):
        cfg['token'] = cfg['token'][:4] + '...'

    print_json(cfg, title="Configuration")


# ============================================================================
# Probes
# ============================================================================

def _run_probe(kind: str, timeout: float):
    try:
        client = ProbeClient(timeout=timeout)
        outcome = client.live() if kind == 'live' else client.ready()
    except (ValueError, ProbeClientError) as e:
        print_error(f"{kind} probe failed: {e}")
        sys.exit(1)

    print_probe_outcome(outcome)
    if not outcome.healthy:
        sys.exit(1)


@cli.command()
@click.option('--timeout', type=float, default=5.0, show_default=True, help='HTTP timeout (seconds)')
def live(timeout):
    """Call the liveness probe (/healthz)"""
    _run_probe('live', timeout)


@cli.command()
@click.option('--timeout', type=float, default=5.0, show_default=True, help='HTTP timeout (seconds)')
def ready(timeout):
    """Call the readiness probe (/readyz); exit 1 when unready"""
    _run_probe('ready', timeout)


# ============================================================================
# Site configuration
# ============================================================================

@cli.command('site-config')
def site_config():
    """Resolve the site configuration from the local environment"""
    from siteprobe.exceptions import ConfigurationError
    from siteprobe.siteconfig import resolve_site_config

    try:
        site = resolve_site_config()
    except ConfigurationError as e:
        print_error(e.message)
        sys.exit(1)

    print_json(site.masked(), title="Site configuration")
    if site.extra:
        print_info(f"{len(site.extra)} extra constant(s) from WORDPRESS_CONFIG_EXTRA")


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == '__main__':
    main()
