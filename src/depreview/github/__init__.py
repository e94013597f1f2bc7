"""GitHub integration for dependency review.

  - Actions run context and Action inputs
  - Dependency graph comparison client
  - Check-run and job-summary reporting
  - Markdown / HTML report rendering
"""
