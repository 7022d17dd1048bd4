import asyncio

from signtalk.backend.core.config import ALPHABET, SEED_WORDS
from signtalk.backend.storage import VocabularyStore, create_engine, create_session_factory


def _run_with_store(tmp_path, scenario):
    async def runner():
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'nested' / 'vocab.db'}")
        store = VocabularyStore(engine, create_session_factory(engine))
        try:
            return await scenario(store)
        finally:
            await engine.dispose()

    return asyncio.run(runner())


def test_initialize_seeds_once(tmp_path):
    async def scenario(store):
        first = await store.initialize()
        second = await store.initialize()
        return first, second, await store.count()

    first, second, total = _run_with_store(tmp_path, scenario)

    assert first == len(ALPHABET) + len(SEED_WORDS)
    assert second == 0
    assert total == first


def test_get_all_returns_alphabet_and_words(tmp_path):
    async def scenario(store):
        await store.initialize()
        return await store.get_all()

    entries = _run_with_store(tmp_path, scenario)
    keys = [entry.key for entry in entries]

    assert keys == sorted(keys)
    assert set(ALPHABET) <= set(keys)
    assert {"OLA", "BEM", "MAL"} <= set(keys)
    by_key = {entry.key: entry for entry in entries}
    assert by_key["A"].category == "Alfabeto"
    assert by_key["A"].media_url == "/gestos/A.gif"
    assert by_key["OLA"].category == "Saudacao"


def test_lookup_is_case_insensitive(tmp_path):
    async def scenario(store):
        await store.initialize()
        return (
            await store.get_by_key("a"),
            await store.get_by_key("A"),
            await store.get_by_key("  ola "),
        )

    lower, upper, word = _run_with_store(tmp_path, scenario)

    assert lower is not None and upper is not None
    assert (lower.key, lower.category, lower.media_url) == (upper.key, upper.category, upper.media_url)
    assert word.key == "OLA"


def test_missing_key_returns_none(tmp_path):
    async def scenario(store):
        await store.initialize()
        return [await store.get_by_key(key) for key in ("XYZ", "", "ab", "1")]

    assert _run_with_store(tmp_path, scenario) == [None, None, None, None]
