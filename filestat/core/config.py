import argparse
import os
import posixpath
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from filestat import __version__
from filestat.core.logging_config import LOG_LEVELS

DEFAULT_CONFIG_FILE = "filestat.yaml"
DEFAULT_WORKING_DIR = "."
DEFAULT_LISTEN_ADDRESS = ":9943"
DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_NAMESPACE = "file"
NO_TREE = "-none-"
NO_CONFIG_FILE = "none"


class Settings:
    # API Settings
    PROJECT_NAME: str = "File Status Exporter"
    VERSION: str = __version__

    # Exporter defaults, overridden by command line flags
    CONFIG_FILE: str = os.getenv("FILESTAT_CONFIG_FILE", DEFAULT_CONFIG_FILE)
    LOG_LEVEL: str = os.getenv("FILESTAT_LOG_LEVEL", "info").lower()
    LOG_FILE: str = os.getenv("FILESTAT_LOG_FILE", "")
    LISTEN_ADDRESS: str = os.getenv("FILESTAT_LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS)
    METRICS_PATH: str = os.getenv("FILESTAT_METRICS_PATH", DEFAULT_METRICS_PATH)
    NAMESPACE: str = os.getenv("FILESTAT_NAMESPACE", DEFAULT_NAMESPACE)


settings = Settings()


@dataclass
class RuntimeOptions:
    """Process-level options resolved from command line and config document."""
    working_directory: str
    host: str
    port: int
    metrics_path: str


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filestat_exporter",
        description="Expose statistics of files matching glob patterns as Prometheus metrics.",
    )
    parser.add_argument("patterns", nargs="*", metavar="PATTERN",
                        help="Glob patterns of files to collect (added to the general scope).")
    parser.add_argument("--config.file", dest="config_file", default=settings.CONFIG_FILE,
                        help='The path to the configuration file (use "none" to disable).')
    parser.add_argument("--log.level", dest="log_level", default=settings.LOG_LEVEL,
                        choices=sorted(LOG_LEVELS),
                        help="Only log messages with the given severity or above.")
    parser.add_argument("--log.file", dest="log_file", default=settings.LOG_FILE,
                        help="Also write logs to this rotating file.")
    parser.add_argument("--metric.crc32", dest="enable_crc32", action="store_true",
                        help="Generate CRC32 hash metric of files.")
    parser.add_argument("--metric.nb_lines", dest="enable_nb_lines", action="store_true",
                        help="Generate line number metric of files.")
    parser.add_argument("--path.cwd", dest="working_directory", default=DEFAULT_WORKING_DIR,
                        help="Working directory of path pattern collection.")
    parser.add_argument("--web.listen-address", dest="listen_address", default=settings.LISTEN_ADDRESS,
                        help="The address to listen on for HTTP requests.")
    parser.add_argument("--web.telemetry-path", dest="metrics_path", default=settings.METRICS_PATH,
                        help="The path under which to expose metrics.")
    parser.add_argument("--tree.name", dest="tree_name", default=NO_TREE,
                        help="Name of tree label to use - default if no label.")
    parser.add_argument("--tree.root", dest="tree_root", default=None,
                        help="Path to use as root of patterns.")
    parser.add_argument("--namespace", dest="namespace", default=settings.NAMESPACE,
                        help="Namespace prefixing every metric name.")
    parser.add_argument("--version", dest="print_version", action="store_true",
                        help="Print the version of the exporter and exit.")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def clean_metrics_path(path: str) -> str:
    """Return an absolute, normalised URL path ('metrics/' -> '/metrics')."""
    return posixpath.normpath("/" + path.lstrip("/"))


def split_listen_address(address: str) -> Tuple[str, int]:
    """Split 'host:port' into its parts; an empty host listens on all interfaces.

    Raises:
        ValueError: If the port is missing or not a number
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in listen address '{address}'")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


def _override(cli_value: str, cli_default: str, config_value: Optional[str]) -> Tuple[str, bool]:
    """Pick the command line value when explicitly changed or when the config is silent.

    Returns:
        The chosen value and whether it replaced a config value
    """
    if cli_value != cli_default or not config_value:
        return cli_value, bool(config_value)
    return config_value, False


def resolve_runtime_options(args: argparse.Namespace, exporter, logger) -> RuntimeOptions:
    """Resolve working directory, listen address and metrics path.

    Args:
        args: Parsed command line
        exporter: The merged exporter section of the config document
        logger: Logger receiving the override notices
    """
    working_directory, overridden = _override(
        args.working_directory, DEFAULT_WORKING_DIR, exporter.working_directory
    )
    if overridden:
        logger.info(f"Config override from parameter: working_directory={working_directory}")

    metrics_path, overridden = _override(args.metrics_path, settings.METRICS_PATH, exporter.metrics_path)
    if overridden:
        logger.info(f"Config override from parameter: metrics_path={metrics_path}")

    listen_address, overridden = _override(args.listen_address, settings.LISTEN_ADDRESS, exporter.listen_address)
    if overridden:
        logger.info(f"Config override from parameter: listen_address={listen_address}")
    host, port = split_listen_address(listen_address)

    return RuntimeOptions(
        working_directory=working_directory,
        host=host,
        port=port,
        metrics_path=clean_metrics_path(metrics_path),
    )


def version_string() -> str:
    return f"filestat_exporter {settings.VERSION}"


