"""CLI entry point for shotlab.cli module.

Enables execution via: python -m shotlab.cli
"""

from shotlab.cli.stats import main

if __name__ == "__main__":
    main()
