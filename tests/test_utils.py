from mumo.utils import absolute_url, slugify


def test_slugify_basic() -> None:
    assert slugify("The Amazing Adventure!") == "the-amazing-adventure"


def test_slugify_strips_accents_and_falls_back() -> None:
    assert slugify("Café Crème") == "cafe-creme"
    assert slugify("!!!") == "comic"


def test_absolute_url() -> None:
    assert absolute_url("https://mumo.example/", "/comics/a.svg") == "https://mumo.example/comics/a.svg"
    assert absolute_url("https://mumo.example", "https://cdn.example/a.png") == "https://cdn.example/a.png"
