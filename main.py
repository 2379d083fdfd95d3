# main.py

"""
Run the safety stock engine with config/config.yaml.

    python main.py [path/to/config.yaml]
"""

import sys

from pipelines.run_engine import run_engine


def main():
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config/config.yaml"
    run_engine(config_path)


if __name__ == "__main__":
    main()
