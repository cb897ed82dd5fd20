from __future__ import annotations


class StickerPipelineError(RuntimeError):
    def __init__(self, message: str, raw_response: dict | str | None = None):
        super().__init__(message)
        self.raw_response = raw_response


class BackgroundRemovalFailed(StickerPipelineError):
    def __init__(self, message: str, status_code: int | None = None, raw_response=None):
        super().__init__(message, raw_response=raw_response)
        self.status_code = status_code


class InvalidImageDimensions(StickerPipelineError):
    pass


class VideoEncodeFailed(StickerPipelineError):
    def __init__(self, message: str, stderr: str | None = None):
        super().__init__(message, raw_response=stderr)
        self.stderr = stderr


class SendFailed(StickerPipelineError):
    pass
