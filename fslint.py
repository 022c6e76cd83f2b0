"""fslint CLI - File intelligence scanner.

Runs the CLI app from fslint.cli, for `python fslint.py` usage.

Usage examples:
    # Scan the current directory
    python fslint.py scan .

    # Only recently modified images
    python fslint.py query "tag:image file-age:today"

    # JSON output with a file cap
    python fslint.py scan ~/Downloads --format json --max-files 1000
"""

from fslint.cli import app

if __name__ == "__main__":
    app()
