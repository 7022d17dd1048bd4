"""
Start the SignTalk API server.
"""
import sys

from signtalk.cli import main

if __name__ == "__main__":
    sys.exit(main(["serve", *sys.argv[1:]]))
