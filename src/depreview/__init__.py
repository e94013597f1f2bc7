"""depreview - dependency review for pull requests.

Evaluates the dependency changes a pull request introduces against a
vulnerability-severity policy and a license allow/deny policy.
"""

__version__ = "0.1.0"
