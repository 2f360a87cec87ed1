"""Package entry point for ``python -m model_versioning``.

WHY: Users run the converter as ``python -m model_versioning convert ...``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from model_versioning.cli import main

if __name__ == "__main__":
    main()
