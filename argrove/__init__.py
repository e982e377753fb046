__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'argrove'
__author__ = 'Argrove Developers'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .values import *
from .grammar import *
from .outcome import *
from .faults import *
from .helper import *
from .dsl import *
from .codegen import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the value types
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the grammar model
__all__ += grammar.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parse outcome
__all__ += outcome.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help renderer
__all__ += helper.__all__  # type: ignore[attr-defined]
# Load the exposed API of the grammar text loader
__all__ += dsl.__all__  # type: ignore[attr-defined]
# Load the exposed API of the code generator
__all__ += codegen.__all__  # type: ignore[attr-defined]
