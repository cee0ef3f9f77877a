from blobcache_lib.cache.naming import MAX_OBJECT_NAME_LENGTH, sanitize


def test_clean_key_is_unchanged():
    assert sanitize('linux-v1-abc123') == 'linux-v1-abc123'
    assert sanitize('deps/node_modules-ubuntu') == 'deps/node_modules-ubuntu'


def test_illegal_characters_become_underscores():
    assert sanitize('a\\b?c#d') == 'a_b_c_d'
    # whitespace runs collapse to a single underscore
    assert sanitize('cache key\t\n here') == 'cache_key_here'


def test_sanitize_is_stable_on_clean_output():
    for key in ['linux-v1', 'a b c', 'x?y#z', 'k' * 5000]:
        once = sanitize(key)
        assert sanitize(once) == once


def test_long_keys_are_bounded_and_hashed():
    key = 'k' * (MAX_OBJECT_NAME_LENGTH + 50)
    name = sanitize(key)
    assert len(name) == MAX_OBJECT_NAME_LENGTH
    assert name[-9] == '_'
    assert all(c in '0123456789abcdef' for c in name[-8:])


def test_long_keys_with_same_truncation_stay_distinct():
    base = 'x' * MAX_OBJECT_NAME_LENGTH
    a = sanitize(base + '-a')
    b = sanitize(base + '-b')
    assert a != b
    assert len(a) <= MAX_OBJECT_NAME_LENGTH and len(b) <= MAX_OBJECT_NAME_LENGTH


def test_digest_uses_original_key():
    # both sanitize to the same truncated body but differ before sanitization
    a = sanitize('?' * 2000)
    b = sanitize('#' * 2000)
    assert a[:-8] == b[:-8]
    assert a != b


def test_custom_max_length():
    assert len(sanitize('abcdefghijklmnopqrstuvwxyz', max_length=16)) == 16
    assert sanitize('short', max_length=16) == 'short'
