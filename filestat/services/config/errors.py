class ConfigError(Exception):
    """Malformed or unusable configuration; fatal at startup."""
    pass


class NothingToCollectError(ConfigError):
    """No pattern group is configured anywhere."""
    pass
