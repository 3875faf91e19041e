"""Custom exceptions for bloatreport."""


class BloatReportError(Exception):
    """Base exception for all bloatreport errors."""


class ConfigError(BloatReportError):
    """Configuration-related errors."""


class SnapshotError(BloatReportError):
    """Snapshot difference data could not be loaded."""


class ContextError(BloatReportError):
    """The issue or pull request to comment on could not be determined."""


class GitHubError(BloatReportError):
    """Issue tracker API errors."""


class CommentListError(GitHubError):
    """Listing the existing comments of an issue failed."""

    def __init__(self, issue_number: int, detail: str = ""):
        self.issue_number = issue_number
        message = f"Error fetching comments for MR {issue_number}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CommentWriteError(GitHubError):
    """Creating or updating a comment failed."""
