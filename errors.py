"""Error types raised by the group-by-year tool."""


class GroupByYearError(Exception):
    """Base class for all errors raised by this tool."""


class ConfigError(GroupByYearError):
    """Missing or invalid configuration (environment, arguments, input file)."""


class AuthError(GroupByYearError):
    """The client-credentials token request failed or returned junk."""


class FetchError(GroupByYearError):
    """Track metadata could not be fetched for a single track."""
