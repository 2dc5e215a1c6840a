"""Security lints over a compiler's resolved semantic tree."""

from importlib.metadata import version, PackageNotFoundError

from .engine import LintSession, run
from .registry import RuleRegistry, register

try:
    __version__ = version("seclint")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"

__all__ = ["__version__", "LintSession", "RuleRegistry", "register", "run"]
