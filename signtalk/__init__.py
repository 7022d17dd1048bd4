"""SignTalk: sign-language gesture trainer and recognizer."""

__version__ = "0.1.0"
