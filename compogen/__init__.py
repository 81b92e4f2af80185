"""
compogen - Composable Genetic Algorithms

A population-based search engine over pluggable, structurally composable
representations. Operators recurse over And/Or representations through
configurable child-to-operator matching and reduction policies.
"""

__version__ = "0.1.0"

# Expose common submodules for convenience
from .core import *  # noqa: F401,F403
from .diversity import *  # noqa: F401,F403
from .evolution import *  # noqa: F401,F403
from .hierarchical import *  # noqa: F401,F403
from .representations import *  # noqa: F401,F403
from .utils import *  # noqa: F401,F403

# Configuration presets as top-level names
from .config import PRESET_MINIMAL, PRESET_RESEARCH, PRESET_STANDARD, pass_from_config  # noqa: F401
