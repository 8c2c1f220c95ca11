class HotserveError(Exception):
    """Base class for fatal startup errors."""


class ServePathError(HotserveError):
    pass


class PortInUseError(HotserveError):
    def __init__(self, host, port):
        super().__init__(f"Port {port} is already in use on {host}")
        self.host = host
        self.port = port
