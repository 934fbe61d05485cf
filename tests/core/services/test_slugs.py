import pytest

from mdlinks.core.services.slugs import MAX_SUFFIX, SlugGenerator, slugify


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Foo/Bar", "foobar"),
        ("Foo (Bar)", "foo-bar"),
        ("-Client-Side", "-client-side"),
        ("A Link Inside", "a-link-inside"),
        ("Header with & symbol", "header-with--symbol"),
        ("Punctuation,   and    repeating:  spaces", "punctuation-and-repeating-spaces"),
        ("_foo_bar", "_foo_bar"),
        ("  Leading space", "leading-space"),
        ("Step 2: Install", "step-2-install"),
        ("Über Café", "über-café"),
        ("Tabs\tand\nnewlines", "tabs-and-newlines"),
        ("!!!", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_slugify_is_deterministic():
    text = "Some *odd* Heading -- with: punctuation?"
    assert slugify(text) == slugify(text)


def test_generator_suffixes_collisions_in_order():
    gen = SlugGenerator()
    assert gen.generate("Foo") == "foo"
    assert gen.generate("Foo") == "foo-1"
    assert gen.generate("foo") == "foo-2"
    assert gen.seen == {"foo", "foo-1", "foo-2"}


def test_generator_skips_suffix_taken_by_literal_heading():
    gen = SlugGenerator()
    assert gen.generate("Foo") == "foo"
    assert gen.generate("Foo 1") == "foo-1"
    assert gen.generate("Foo") == "foo-2"


def test_generator_same_result_for_same_prior_state():
    first = SlugGenerator(["intro"]).generate("Intro")
    second = SlugGenerator(["intro"]).generate("Intro")
    assert first == second == "intro-1"


def test_generator_ignores_empty_text():
    gen = SlugGenerator()
    assert gen.generate("") is None
    assert gen.seen == set()


def test_generator_gives_up_after_max_suffix():
    taken = ["x"] + [f"x-{i}" for i in range(1, MAX_SUFFIX)]
    gen = SlugGenerator(taken)
    assert gen.generate("X") is None
    assert len(gen.seen) == MAX_SUFFIX
