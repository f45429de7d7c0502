class BlockSightError(Exception):
    pass


class ConfigurationMissing(BlockSightError):
    pass


class MalformedInput(BlockSightError):
    pass


class DataSourceError(BlockSightError):
    pass


class UpstreamUnavailable(DataSourceError):
    pass


class UpstreamRejected(DataSourceError):
    pass


class NotFound(DataSourceError):
    pass


class EmptyGraph(Exception):
    """
    Raised by the graph builder when there is nothing to draw.

    Not a BlockSightError: callers render a "no data" state instead of an error.
    """
