from pathlib import Path
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from guildsim.bootstrap import configure_logging
from guildsim.presentation.cli import main as cli_main

load_dotenv()


def main() -> int:
    configure_logging()
    try:
        return cli_main()
    except KeyboardInterrupt:
        print("\nSimulation interrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
