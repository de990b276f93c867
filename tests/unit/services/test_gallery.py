"""
Unit tests for gallery URL derivation.
"""

from photoshelf.services.gallery import build_gallery, normalize_key, original_url, thumbnail_url


class TestGalleryUrls:
    def test_original_url(self):
        assert original_url("http://cdn.test", "photos/a.jpg") == "http://cdn.test/photos/a.jpg"

    def test_thumbnail_url(self):
        assert (
            thumbnail_url("http://cdn.test", "a.jpg", 80)
            == "http://cdn.test/a.jpg?imageView2/2/w/200/h/400/format/webp/q/80"
        )

    def test_build_gallery_root_example(self):
        result = build_gallery({"root": ["a.jpg"]}, "http://cdn.test", 80)

        assert result == {
            "root": [
                {
                    "original": "http://cdn.test/a.jpg",
                    "thumbnail": "http://cdn.test/a.jpg?imageView2/2/w/200/h/400/format/webp/q/80",
                }
            ]
        }

    def test_build_gallery_keeps_folder_and_key_order(self):
        catalog = {"b": ["p/b/2.jpg", "p/b/1.jpg"], "a": ["p/a/1.jpg"]}

        result = build_gallery(catalog, "http://cdn.test", 60)

        assert list(result) == ["b", "a"]
        assert [entry["original"] for entry in result["b"]] == [
            "http://cdn.test/p/b/2.jpg",
            "http://cdn.test/p/b/1.jpg",
        ]

    def test_build_gallery_empty_catalog(self):
        assert build_gallery({}, "http://cdn.test", 80) == {}


class TestNormalizeKey:
    def test_strips_base_url(self):
        assert normalize_key("http://cdn.test/photos/a.jpg", "http://cdn.test") == "photos/a.jpg"

    def test_bare_key_unchanged(self):
        assert normalize_key("photos/a.jpg", "http://cdn.test") == "photos/a.jpg"

    def test_other_host_unchanged(self):
        assert normalize_key("http://other.test/a.jpg", "http://cdn.test") == "http://other.test/a.jpg"

    def test_empty_base_url(self):
        assert normalize_key("/a.jpg", "") == "/a.jpg"
