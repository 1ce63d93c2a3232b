"""
Entry point for running PageQuill as a module.

Usage:
    python -m pagequill convert lesson.html -o lesson.pdf
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
