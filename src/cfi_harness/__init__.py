"""CFI compliance harness - scenario-execution substrate for BDD steps."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cfi-compliance-harness")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"
