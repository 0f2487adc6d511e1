"""
Tests for cache key derivation and descriptor query strings.
"""

from iconapi.icons.keys import ICON_KEY_LENGTH, derive_key, querify_descriptor, storage_path
from iconapi.icons.models import IconDescriptor, parse_descriptor


class TestDeriveKey:

    def test_equivalent_descriptors_share_key(self):
        a = parse_descriptor({"specifier": "symbol:star", "color": "black", "flipVertical": False})
        b = parse_descriptor({"specifier": "symbol:star", "color": "#000", "scale": 1})
        assert derive_key(a) == derive_key(b)

    def test_color_changes_key(self):
        a = IconDescriptor(specifier="symbol:star", color="#000000")
        b = IconDescriptor(specifier="symbol:star", color="#000001")
        assert derive_key(a) != derive_key(b)

    def test_flags_change_key(self):
        base = IconDescriptor(specifier="symbol:star")
        keys = {
            derive_key(base),
            derive_key(IconDescriptor(specifier="symbol:star", flip_horizontal=True)),
            derive_key(IconDescriptor(specifier="symbol:star", flip_vertical=True)),
            derive_key(IconDescriptor(specifier="symbol:star", preserve_color=True)),
            derive_key(IconDescriptor(specifier="symbol:star", preserve_aspect=True)),
            derive_key(IconDescriptor(specifier="symbol:star", scale=2)),
        }
        assert len(keys) == 6

    def test_key_shape(self):
        key = derive_key(IconDescriptor(specifier="iconify:mdi:home"))
        assert len(key) == ICON_KEY_LENGTH
        assert all(ch in "0123456789abcdef" for ch in key)

    def test_key_is_stable(self):
        d = IconDescriptor(specifier="text:AB", color="#123456")
        assert derive_key(d) == derive_key(IconDescriptor(specifier="text:AB", color="#123456"))


class TestQuerifyDescriptor:

    def test_sorted_and_encoded(self):
        d = IconDescriptor(specifier="text:A B", preserve_color=True, color="#ff0000")
        assert querify_descriptor(d) == "color=%23ff0000&preserveColor=1&specifier=text%3AA%20B"

    def test_defaults_omitted(self):
        d = IconDescriptor(specifier="symbol:star", flip_horizontal=False)
        assert querify_descriptor(d) == "specifier=symbol%3Astar"

    def test_cache_key_appended_in_order(self):
        d = IconDescriptor(specifier="symbol:star", scale=2.5)
        assert querify_descriptor(d, "abc") == "cacheKey=abc&scale=2.5&specifier=symbol%3Astar"


class TestStoragePath:

    def test_color_suffix(self):
        bare = IconDescriptor(specifier="symbol:star")
        colored = IconDescriptor(specifier="symbol:star", color="#4d4d4d")
        assert storage_path(bare, "icons/") == "icons/" + derive_key(bare)
        assert storage_path(colored, "icons/") == "icons/" + derive_key(bare) + "-4d4d4d"
