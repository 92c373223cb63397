"""Package entry point for ``python -m caption_timeline``.

WHY: Users run the engine as ``python -m caption_timeline segment
words.json`` without installing the console script. Python's ``-m`` flag
looks for ``__main__.py`` inside the package and executes it.

HOW: Delegates to the CLI's main() and exits with its return code.
"""

import sys

if __name__ == "__main__":
    from caption_timeline.cli import main
    sys.exit(main())
