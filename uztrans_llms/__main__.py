"""
Entry point for running UzTrans-LLMs as a module.

Usage:
    python -m uztrans_llms --help
    python -m uztrans_llms translate "Salom, yaxshimisiz?" --to ru
    python -m uztrans_llms history list
"""
from .cli import app


if __name__ == "__main__":
    app()
