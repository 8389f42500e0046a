#!/usr/bin/env python3
"""FocusCycle entry point.

Run with:
    python main.py
    python -m focuscycle
"""

from focuscycle.__main__ import main


if __name__ == "__main__":
    main()
