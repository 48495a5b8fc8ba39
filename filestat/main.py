"""Process entry point: flags, configuration merge, then the HTTP server."""

import os
import sys
from typing import Optional, Sequence

import uvicorn

from filestat.app import create_app
from filestat.core.config import NO_TREE, parse_args, resolve_runtime_options, settings, version_string
from filestat.core.logging_config import configure_logging, get_logger
from filestat.services.config import ConfigError, cli_defaults, generate_collector, merge_config, read_config_file
from filestat.services.metrics.instance import set_files_collector

logger = get_logger("filestat")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    if args.print_version:
        print(version_string(), file=sys.stderr)
        return 0

    configure_logging(args.log_level, args.log_file or None)

    defaults = cli_defaults(
        args.patterns,
        enable_crc32=args.enable_crc32,
        enable_nb_lines=args.enable_nb_lines,
        tree_name=None if args.tree_name == NO_TREE else args.tree_name,
        tree_root=args.tree_root,
    )
    try:
        config = merge_config(read_config_file(args.config_file), defaults)
    except ConfigError as e:
        logger.error(f"Error reading config {args.config_file}: {e}")
        return 1

    try:
        options = resolve_runtime_options(args, config.exporter, logger)
    except ValueError as e:
        logger.error(f"Invalid listen address: {e}")
        return 1

    # adjust working directory globally, patterns are relative to it
    if options.working_directory:
        try:
            os.chdir(options.working_directory)
        except OSError as e:
            logger.error(f"Could not change to directory {options.working_directory}: {e}")
            return 1
        logger.debug(f"Changed working directory: {options.working_directory}")
    logger.info(f"Working directory: {os.getcwd()}")

    set_files_collector(generate_collector(config, namespace=args.namespace))

    logger.info(f"Starting {settings.PROJECT_NAME} version {settings.VERSION} on {options.host}:{options.port}")
    uvicorn.run(
        create_app(options.metrics_path),
        host=options.host,
        port=options.port,
        log_level="warning" if args.log_level == "warn" else args.log_level,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
