"""CLI shim -- delegates to pagepress.cli.main().

Usage:
    python convert.py HM_12
    python convert.py HM_12 --input-dir ./input --output-dir ./output
"""

from pagepress.cli import main

if __name__ == "__main__":
    main()
