"""SignTalk HTTP backend."""
