"""Entry point for running ebook-analyzer as a module.

Usage:
    python -m ebook_analyzer [command] [options]
"""

from ebook_analyzer.cli.main import app

if __name__ == "__main__":
    app()
