#!/usr/bin/env python3
"""
Console entrypoint - launches the terminal configuration console.
"""

import sys
from pathlib import Path

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()

# Add project root to path for imports (iot_console/ and tui/ are both in project root)
sys.path.insert(0, str(Path(__file__).parent.parent))


def main():
    """Console entrypoint - launches the textual UI."""
    try:
        from tui.main import main as tui_main
    except ImportError as e:
        print(f"❌ Failed to import console: {e}")
        print("   Make sure textual is installed: pip install textual")
        return 1

    tui_main()
    return 0


if __name__ == "__main__":
    sys.exit(main())
