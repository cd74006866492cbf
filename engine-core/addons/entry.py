"""mitmdump entry script: `mitmdump -s entry.py`."""
import sys
from pathlib import Path
from typing import Any, List

# Add current directory to sys.path to allow package imports
sys.path.append(str(Path(__file__).parent))

from chheader import CoreAddon

addons: List[Any] = [
    CoreAddon()
]
