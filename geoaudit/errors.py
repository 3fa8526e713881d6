"""Exception types and the process exit codes they map to."""

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FETCH = 2
EXIT_NO_CONTENT = 3
EXIT_FATAL = 99


class GeoAuditError(Exception):
    exit_code = EXIT_FATAL


class UsageError(GeoAuditError):
    exit_code = EXIT_USAGE


class FetchError(GeoAuditError):
    """The fetch collaborator raised or reported failure."""

    exit_code = EXIT_FETCH


class NoContentError(GeoAuditError):
    """The fetch succeeded but no HTML could be located in the response."""

    exit_code = EXIT_NO_CONTENT
