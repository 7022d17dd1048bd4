"""
Start the interactive SignTalk trainer (camera preview, training and recognition).
"""
import sys

from signtalk.cli import main

if __name__ == "__main__":
    sys.exit(main(["run", *sys.argv[1:]]))
