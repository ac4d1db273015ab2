from typing import Optional


class ValidationError(Exception):
    pass


class TransformError(Exception):
    def __init__(self, platform: Optional[str], reason: str):
        self.platform = platform
        super().__init__(f"{reason} (platform: {platform})")


class StoreError(Exception):
    pass


class UpstreamError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PipelineError(Exception):
    pass
