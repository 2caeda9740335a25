#!/usr/bin/env python3
"""``glide`` Growth Line Pipeline Runner.

Usage:
    python scripts/run_glide_pipeline.py scripts/user_config.py
    python scripts/run_glide_pipeline.py scripts/user_config.py --input-dir /data/exp01
    python scripts/run_glide_pipeline.py scripts/user_config.py --no-rectify --subtract-background

Note: User config in scripts/user_config.py, expert defaults in glide.schemas.param
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from glide.cli.run_pipeline import main


if __name__ == "__main__":
    sys.exit(main())
