"""
File Status Exporter

Exposes size, modification time and optionally CRC32 hash and line count of
files matching glob patterns as Prometheus gauges.

Environment Variables:
    FILESTAT_CONFIG_FILE: Configuration file (default: filestat.yaml, "none" to disable)
    FILESTAT_LOG_LEVEL: debug, info, warn or error (default: info)
    FILESTAT_LOG_FILE: Also write logs to this rotating file (default: none)
    FILESTAT_LISTEN_ADDRESS: Address to listen on (default: :9943)
    FILESTAT_METRICS_PATH: Path of the scrape endpoint (default: /metrics)
    FILESTAT_NAMESPACE: Prefix of metric names (default: file)

CLI Usage:
    python main.py 'logs/*.log'

    # Hash and count lines of every matched file
    python main.py --metric.crc32 --metric.nb_lines 'logs/**/*.log'

    # Use a configuration file with trees
    python main.py --config.file filestat.yaml
"""

import sys

from filestat.main import main

if __name__ == "__main__":
    sys.exit(main())
