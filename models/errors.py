from typing import Optional


class PipelineError(Exception):
    """Base class for conditions that halt a translation run."""

    user_message = "Something went wrong."

    def __str__(self):
        return self.user_message


class NoReferenceReceived(PipelineError):
    user_message = "No URL was received from the share sheet."


class DownloadFailed(PipelineError):
    def __init__(self, status: int, url: str):
        super().__init__(status, url)
        self.status = status
        self.url = url

    @property
    def user_message(self):
        return f"Download failed (HTTP {self.status}) for {self.url}"


class InvalidImageData(PipelineError):
    user_message = "The downloaded data is not a valid image."


class NetworkError(PipelineError):
    def __init__(self, cause: Exception):
        super().__init__(cause)
        self.cause = cause

    @property
    def user_message(self):
        return f"Network error: {self.cause}"


class NoImageFound(PipelineError):
    def __init__(self, detail: str, resolved_url: Optional[str] = None,
                 candidate_count: int = 0, body_preview: str = ""):
        super().__init__(detail)
        self.detail = detail
        self.resolved_url = resolved_url
        self.candidate_count = candidate_count
        self.body_preview = body_preview

    @property
    def user_message(self):
        return f"Could not find an image. {self.detail}"


class NoTextFound(PipelineError):
    user_message = "No text was found in this image."


class RecognitionFailed(PipelineError):
    def __init__(self, cause: Exception):
        super().__init__(cause)
        self.cause = cause

    @property
    def user_message(self):
        return f"Text recognition failed: {self.cause}"


class TranslationFailed(PipelineError):
    def __init__(self, cause: Exception):
        super().__init__(cause)
        self.cause = cause

    @property
    def user_message(self):
        return f"Translation failed: {self.cause}"
