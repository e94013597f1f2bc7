"""Custom exceptions for depreview."""


class DepReviewError(Exception):
    """Base exception for all depreview errors."""


class ConfigError(DepReviewError):
    """Configuration-related errors."""


class UnsupportedEventError(DepReviewError):
    """Raised when the workflow was triggered by something other than a pull request."""

    def __init__(self, event_name: str):
        self.event_name = event_name
        super().__init__(
            f'This run was triggered by the "{event_name}" event, which is unsupported. '
            'Please ensure you are using the "pull_request" event for this workflow.'
        )


class GitHubAPIError(DepReviewError):
    """A GitHub REST call returned an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ComparisonNotFoundError(GitHubAPIError):
    """No dependency data for the requested owner, repository or revision range."""

    def __init__(self) -> None:
        super().__init__(
            "Dependency review could not obtain dependency data for the specified "
            "owner, repository, or revision range.",
            status_code=404,
        )


class DependencyGraphDisabledError(GitHubAPIError):
    """The dependency graph is not enabled on the repository."""

    def __init__(self, owner: str, repo: str, server_url: str = "https://github.com"):
        self.settings_url = f"{server_url.rstrip('/')}/{owner}/{repo}/settings/security_analysis"
        super().__init__(
            "Dependency review is not supported on this repository. Please ensure that "
            f"Dependency graph is enabled, see {self.settings_url}",
            status_code=403,
        )
