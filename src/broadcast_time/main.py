#!/usr/bin/env python3
"""
broadcast-time: Broadcast Time Reconciliation Service

Main entry point for the broadcast-time daemon. This service:
1. Remembers the last (utc, local) time pair received in a broadcast signal
2. Answers effective-time queries for applications relying on broadcast time
3. Re-derives UTC from broadcast local time through the device timezone
4. Serves the methods over HTTP/JSON for the surrounding device services

Usage:
    # Start daemon
    broadcast-time --config /etc/broadcast-time/config.toml

    # Trust broadcast time, device timezone forced
    broadcast-time --broadcast-effective --timezone Europe/Berlin

Architecture:
    tuner ──setBroadcastTime──▶ BroadcastTimeStore
                                      │
    apps ──getEffectiveBroadcastTime──▶ TimeReconciliationEngine
                                      │
                         system clock + timezone database
"""

import argparse
import logging
import signal
import sys
import time
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger('broadcast-time')

from .engine import BroadcastAuthority, TimeReconciliationEngine
from .output.time_server import REQUEST_TIMEOUT, TimeServer
from .timing.local_time import resolve_timezone, timezone_name
from .timing.time_width import TIME_T_BITS


DEFAULT_CONFIG: Dict[str, Any] = {
    'server': {
        'bind_address': '127.0.0.1',
        'port': 8089,
    },
    'time': {
        'timezone': '',
        'broadcast_effective': False,
    },
}


def setup_logging(debug: bool = False):
    """Configure root logging for the daemon."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from TOML file, filling in defaults.

    Raises:
        FileNotFoundError: if config_path is given but does not exist
        toml.TomlDecodeError: if the file is not valid TOML
        ValueError: if a known section is not a table
    """
    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
    if not config_path:
        return config

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        loaded = toml.load(f)

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        elif section in DEFAULT_CONFIG:
            raise ValueError(f"[{section}] must be a table in {config_path}")
        else:
            config[section] = values
    return config


class BroadcastTimeDaemon:
    """
    Main broadcast-time daemon.

    Owns the broadcast store (through the engine), the authority flag and
    the request server.
    """

    def __init__(self, config: Dict[str, Any], tz: Optional[tzinfo] = None):
        """
        Initialize the daemon.

        Args:
            config: Configuration dictionary (see DEFAULT_CONFIG)
            tz: Device timezone override (default: from config, else system)
        """
        self.config = config
        server_config = config.get('server', {})
        time_config = config.get('time', {})

        self.tz = tz if tz is not None else resolve_timezone(time_config.get('timezone'))
        self.authority = BroadcastAuthority(time_config.get('broadcast_effective', False))
        self.engine = TimeReconciliationEngine(
            is_broadcast_effective=self.authority.is_effective,
            tz=self.tz
        )
        self.server = TimeServer(
            port=server_config.get('port', 8089),
            bind_address=server_config.get('bind_address', '127.0.0.1'),
            request_timeout=server_config.get('request_timeout', REQUEST_TIMEOUT)
        )
        self.server.set_engine(self.engine)

        self.running = False

        logger.info("=" * 60)
        logger.info("broadcast-time initializing")
        logger.info(f"  Timezone: {timezone_name(self.tz)}")
        logger.info(f"  Broadcast effective: {self.authority.is_effective()}")
        logger.info(f"  Native time_t: {TIME_T_BITS}-bit")
        logger.info(f"  Listen: {self.server.bind_address}:{self.server.port}")
        logger.info("=" * 60)

    def start(self):
        """Start the daemon and block until a shutdown signal arrives."""
        logger.info("Starting broadcast-time daemon")

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        self.server.start()
        self.running = True

        try:
            while self.running:
                time.sleep(0.5)
        finally:
            self.stop()

    def stop(self):
        """Stop serving requests."""
        self.running = False
        self.server.stop()
        stats = self.engine.stats
        logger.info(
            f"Served {stats['broadcast_sets']} sets, "
            f"{stats['broadcast_queries']} broadcast queries, "
            f"{stats['effective_queries']} effective queries"
        )
        logger.info("broadcast-time stopped")

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='broadcast-time: Broadcast Time Reconciliation Service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start with config file
    broadcast-time --config /etc/broadcast-time/config.toml

    # Listen on all interfaces, port 9000
    broadcast-time --bind 0.0.0.0 --port 9000

    # Broadcast time authoritative, device timezone forced
    broadcast-time --broadcast-effective --timezone America/New_York
        """
    )

    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--port', '-p',
        type=int,
        help='HTTP port for requests (overrides config, default: 8089)'
    )
    parser.add_argument(
        '--bind',
        help='Address to bind (overrides config, default: 127.0.0.1)'
    )
    parser.add_argument(
        '--timezone', '-z',
        help='IANA timezone used as device timezone (default: system timezone)'
    )
    parser.add_argument(
        '--broadcast-effective',
        action='store_true',
        help='Treat broadcast time as authoritative from startup'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command-line overrides to a loaded configuration."""
    if args.port is not None:
        config.setdefault('server', {})['port'] = args.port
    if args.bind:
        config.setdefault('server', {})['bind_address'] = args.bind
    if args.timezone:
        config.setdefault('time', {})['timezone'] = args.timezone
    if args.broadcast_effective:
        config.setdefault('time', {})['broadcast_effective'] = True
    return config


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        config = apply_overrides(load_config(args.config), args)
        daemon = BroadcastTimeDaemon(config)
    except (OSError, ValueError, toml.TomlDecodeError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        daemon.start()
    except OSError as e:
        logger.error(f"Failed to start time server: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
