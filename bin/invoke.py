import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parent.parent))
from train_invoke.cli import main

if __name__ == "__main__":
    # Expects: python bin/invoke.py <script_name> path/to/config.yaml
    main()
