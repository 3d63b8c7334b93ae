import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

# Flat module layout: make the repo root importable without installing
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
