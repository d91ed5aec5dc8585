class ProbeError(Exception):
    """Base class for all siteprobe errors."""
    pass


class AccessDenied(ProbeError):
    """Probe token missing or wrong. Rendered as 404 so the endpoint stays hidden."""

    def __init__(self, path: str = ""):
        self.path = path
        self.message = f"probe token mismatch on '{path}'"
        super().__init__(self.message)


class DependencyUnavailable(ProbeError):
    def __init__(self, tag: str, detail: str = ""):
        self.tag = tag
        self.detail = detail
        self.message = f"{tag}: {detail}" if detail else tag
        super().__init__(self.message)


class MaintenanceMode(DependencyUnavailable):
    def __init__(self, detail: str = ""):
        super().__init__("maintenance", detail)


class ConfigurationError(ProbeError):
    def __init__(self, key: str, detail: str):
        self.key = key
        self.message = f"Invalid configuration '{key}': {detail}"
        super().__init__(self.message)
